# flowershop/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from flowershop.api.routers import health, orders
from flowershop.data.database import init_models
from flowershop.domain.errors import OrderError, ValidationError
from flowershop.domain.schemas import error_envelope
from flowershop.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def order_error_handler(request: Request, exc: OrderError):
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.http_status, content=error_envelope(exc.to_dict()))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError.from_pydantic(exc)
    return JSONResponse(status_code=error.http_status, content=error_envelope(error.to_dict()))


def create_app(create_tables: bool = True) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            await init_models()
            logger.info("Database tables ready")
        yield

    app = FastAPI(title="Flower Shop Order Service", version="1.0.0", lifespan=lifespan)

    app.add_exception_handler(OrderError, order_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(orders.router)
    return app
