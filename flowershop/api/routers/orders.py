# flowershop/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from flowershop.data.database import get_db
from flowershop.domain.schemas import (
    Envelope,
    OrderCreate,
    OrderDetailOut,
    OrderListOut,
    OrderQuery,
    OrderStatusUpdate,
    OrderUpdate,
    StatusHistoryOut,
)
from flowershop.services.notification_service import NotificationService
from flowershop.services.order_service import OrderService
from flowershop.services.product_client import ProductClient

router = APIRouter(prefix="/orders", tags=["orders"])


def get_catalog() -> ProductClient:
    return ProductClient()


def get_notifier() -> NotificationService:
    return NotificationService()


def get_service(
    db: AsyncSession = Depends(get_db),
    catalog: ProductClient = Depends(get_catalog),
    notifier: NotificationService = Depends(get_notifier),
) -> OrderService:
    return OrderService(db, catalog, notifier)


@router.post("/", response_model=Envelope[OrderDetailOut], status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreate, svc: OrderService = Depends(get_service)):
    """
    Tworzy zamówienie: ceny i stany z katalogu, status pending.
    """
    order = await svc.create_order(payload)
    return Envelope(data=order, message="Order created successfully")


@router.get("/", response_model=Envelope[OrderListOut])
async def list_orders(query: OrderQuery = Depends(), svc: OrderService = Depends(get_service)):
    result = await svc.list_orders(query)
    return Envelope(data=result, message="Orders retrieved successfully")


@router.get("/{order_id}", response_model=Envelope[OrderDetailOut])
async def get_order(order_id: int, svc: OrderService = Depends(get_service)):
    """
    Zamówienie z pozycjami, płatnościami i historią statusów.
    """
    order = await svc.get_order_by_id(order_id)
    return Envelope(data=order, message="Order retrieved successfully")


@router.get("/{order_id}/status-history", response_model=Envelope[List[StatusHistoryOut]])
async def get_order_status_history(order_id: int, svc: OrderService = Depends(get_service)):
    history = await svc.get_order_status_history(order_id)
    return Envelope(data=history, message="Order status history retrieved successfully")


@router.patch("/{order_id}", response_model=Envelope[OrderDetailOut])
async def update_order(
    order_id: int,
    payload: OrderUpdate,
    svc: OrderService = Depends(get_service),
    x_user_id: int | None = Header(None),
):
    order = await svc.update_order(order_id, payload, acting_user=x_user_id)
    return Envelope(data=order, message="Order updated successfully")


@router.patch("/{order_id}/status", response_model=Envelope[OrderDetailOut])
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    svc: OrderService = Depends(get_service),
    x_user_id: int | None = Header(None),
):
    """
    Zmiana statusu przez maszyne stanow, z wpisem w historii.
    x_user_id ustawia middleware auth (poza tym serwisem).
    """
    order = await svc.update_order_status(order_id, payload.status, payload.notes, acting_user=x_user_id)
    return Envelope(data=order, message="Order status updated successfully")
