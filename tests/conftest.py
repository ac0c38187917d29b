"""
Shared fixtures: a throwaway SQLite database per test, a fake catalog and
a notifier that records instead of publishing to Celery.
"""
from decimal import Decimal
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from flowershop.data.database import init_models
from flowershop.domain.pricing import CatalogProduct
from flowershop.services.notification_service import NotificationService
from flowershop.services.order_service import OrderService


class FakeCatalog:
    """In-memory catalog, records every batched read."""

    def __init__(self, products: List[CatalogProduct]):
        self.products = {p.id: p for p in products}
        self.calls: List[List[int]] = []

    async def get_products_by_ids(self, ids: List[int]) -> List[CatalogProduct]:
        self.calls.append(list(ids))
        return [self.products[i] for i in set(ids) if i in self.products]

    def set_price(self, product_id: int, price: str):
        p = self.products[product_id]
        self.products[product_id] = CatalogProduct(
            id=p.id, name=p.name, price=Decimal(price), stock=p.stock, active=p.active, summary=p.summary
        )


class RecordingNotifier(NotificationService):
    def __init__(self):
        self.events: List[tuple] = []

    def emit(self, event_name: str, payload: Dict[str, Any]) -> bool:
        self.events.append((event_name, payload))
        return True


def make_payload(items=None, **overrides) -> Dict[str, Any]:
    payload = {
        "customer_name": "María González",
        "customer_email": "maria@example.com",
        "customer_phone": "+58 412 555 1234",
        "delivery_address": "Av. Libertador, Torre Sur, piso 4",
        "delivery_city": "Caracas",
        "delivery_date": "2026-10-20",
        "delivery_time_slot": "09:00-12:00",
        "notes": "Tarjeta: feliz cumpleaños",
        "items": items if items is not None else [{"product_id": 7, "quantity": 2}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def catalog():
    return FakeCatalog(
        [
            CatalogProduct(id=1, name="Ramo de 12 rosas rojas", price=Decimal("45.00"), stock=20),
            CatalogProduct(id=2, name="Bouquet de girasoles", price=Decimal("32.50"), stock=15),
            CatalogProduct(id=3, name="Orquídea blanca", price=Decimal("58.00"), stock=1),
            CatalogProduct(id=7, name="Arreglo de tulipanes", price=Decimal("25.99"), stock=10),
            CatalogProduct(id=9, name="Corona fúnebre", price=Decimal("120.00"), stock=4, active=False),
        ]
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def service(db, catalog, notifier):
    return OrderService(db, catalog, notifier)
