# flowershop/services/order_service.py
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Type, TypeVar

import pydantic
from sqlalchemy.ext.asyncio import AsyncSession

from flowershop.data.models.order import OrderModel
from flowershop.data.models.order_item import OrderItemModel
from flowershop.data.models.order_status_history import OrderStatusHistoryModel
from flowershop.domain.errors import ConcurrentModification, InvalidTransition, ValidationError
from flowershop.domain.pricing import Catalog, price_items
from flowershop.domain.schemas import (
    OrderCreate,
    OrderDetailOut,
    OrderListOut,
    OrderOut,
    OrderQuery,
    OrderStatusUpdate,
    OrderUpdate,
    PaginationOut,
    StatusHistoryOut,
)
from flowershop.domain.status import INITIAL_STATUS, OrderStatus, transition
from flowershop.repos.order_repo import OrderRepo
from flowershop.services.notification_service import ORDER_CREATED, ORDER_STATUS_CHANGED, NotificationService
from flowershop.utils.logging import get_logger

logger = get_logger(__name__)

# one re-read and re-decide after a lost compare-and-write, then give up
CONFLICT_RETRIES = 1

M = TypeVar("M", bound=pydantic.BaseModel)


def parse(model: Type[M], payload: Any) -> M:
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e) from e


class OrderService:
    """
    Use case'y dla domeny zamowien.

    commands (create_order, update_order_status, update_order) zmieniaja stan
    queries (get_order_by_id, list_orders, get_order_status_history) tylko odczyt
    """

    def __init__(self, db: AsyncSession, catalog: Catalog, notifier: NotificationService | None = None):
        self.repo = OrderRepo(db)
        self.catalog = catalog
        self.notifier = notifier or NotificationService()

    # =====================================================
    # QUERIES
    # =====================================================
    async def get_order_by_id(self, order_id: int) -> OrderDetailOut:
        order = await self.repo.read(order_id)
        return OrderDetailOut.model_validate(order)

    async def get_order_status_history(self, order_id: int) -> List[StatusHistoryOut]:
        rows = await self.repo.history(order_id)
        return [StatusHistoryOut.model_validate(r) for r in rows]

    async def list_orders(self, query: OrderQuery | Dict[str, Any] | None = None) -> OrderListOut:
        query = parse(OrderQuery, query or {})
        orders, total = await self.repo.list_orders(query)

        return OrderListOut(
            orders=[OrderOut.model_validate(o) for o in orders],
            pagination=PaginationOut(
                current_page=query.page,
                total_pages=math.ceil(total / query.limit),
                total_items=total,
                items_per_page=query.limit,
            ),
        )

    # =====================================================
    # COMMANDS
    # =====================================================
    async def create_order(self, payload: OrderCreate | Dict[str, Any]) -> OrderDetailOut:
        """
        1. Walidacja payloadu (przed jakimkolwiek I/O)
        2. Jeden batchowy odczyt katalogu, snapshot cen, kontrola stanow
        3. Naglowek + pozycje + pierwszy wpis historii w jednej transakcji
        4. Event order.created (best effort)
        """
        request = parse(OrderCreate, payload)

        products = await self.catalog.get_products_by_ids([i.product_id for i in request.items])
        priced = price_items(request.items, products)

        now = datetime.now(timezone.utc)
        order = OrderModel(
            user_id=request.user_id,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
            delivery_address=request.delivery_address,
            delivery_city=request.delivery_city,
            delivery_state=request.delivery_state,
            delivery_zip=request.delivery_zip,
            delivery_date=request.delivery_date,
            delivery_time_slot=request.delivery_time_slot,
            delivery_notes=request.delivery_notes,
            notes=request.notes,
            status=INITIAL_STATUS.value,
            total_amount=priced.total_amount,
            version=1,
            created_at=now,
            updated_at=now,
        )
        items = [
            OrderItemModel(
                product_id=d.product_id,
                product_name=d.product_name,
                product_summary=d.product_summary,
                unit_price=d.unit_price,
                quantity=d.quantity,
                subtotal=d.subtotal,
                created_at=now,
            )
            for d in priced.items
        ]
        history = OrderStatusHistoryModel(
            old_status=None,
            new_status=INITIAL_STATUS.value,
            notes="Order created",
            changed_by=None,
            created_at=now,
        )

        created = await self.repo.create(order, items, history)

        logger.info(f"Order {created.id} created for {created.customer_email}, total {created.total_amount}")

        self.notifier.emit(
            ORDER_CREATED,
            {
                "order_id": created.id,
                "status": created.status,
                "customer_email": created.customer_email,
                "total_amount": str(created.total_amount),
                "items": [{"product_id": i.product_id, "quantity": i.quantity} for i in created.items],
            },
        )

        return OrderDetailOut.model_validate(created)

    async def update_order_status(
        self,
        order_id: int,
        status: OrderStatus | str,
        notes: str | None = None,
        acting_user: int | None = None,
    ) -> OrderDetailOut:
        """
        Read, decide, conditional write. A lost race is retried once, and
        only if the status we decided on is still the current one; otherwise
        the caller has to look at the order again.
        """
        request = parse(OrderStatusUpdate, {"status": status, "notes": notes})
        return await self._move_status(order_id, request, acting_user)

    async def _move_status(
        self,
        order_id: int,
        request: OrderStatusUpdate,
        acting_user: int | None,
        fields: Dict[str, Any] | None = None,
    ) -> OrderDetailOut:
        observed: str | None = None
        for attempt in range(1 + CONFLICT_RETRIES):
            current, version = await self.repo.read_status(order_id)

            if observed is not None and current != observed:
                logger.warning(
                    f"Order {order_id} moved {observed} -> {current} while requesting {request.status.value}"
                )
                raise ConcurrentModification(order_id)
            observed = current

            try:
                record = transition(current, request.status)
            except InvalidTransition:
                logger.warning(f"Rejected transition for order {order_id}: {current} -> {request.status.value}")
                raise

            history = OrderStatusHistoryModel(
                old_status=record.previous_status.value,
                new_status=record.new_status.value,
                notes=request.notes,
                changed_by=acting_user,
            )
            updated = await self.repo.apply_transition(order_id, current, version, history, fields)

            if updated is not None:
                logger.info(
                    f"Order {order_id} status {record.previous_status.value} -> {record.new_status.value}"
                    f" (user {acting_user})"
                )
                self.notifier.emit(
                    ORDER_STATUS_CHANGED,
                    {
                        "order_id": order_id,
                        "old_status": record.previous_status.value,
                        "status": record.new_status.value,
                        "notes": request.notes,
                        "changed_by": acting_user,
                    },
                )
                return OrderDetailOut.model_validate(updated)

            logger.warning(f"Write conflict on order {order_id} (attempt {attempt + 1})")

        raise ConcurrentModification(order_id)

    async def update_order(
        self,
        order_id: int,
        patch: OrderUpdate | Dict[str, Any],
        acting_user: int | None = None,
    ) -> OrderDetailOut:
        """
        Admin patch of delivery scheduling and notes. A status in the patch
        goes through the state machine and is written in the same UPDATE as
        the other fields: a rejected transition stores nothing.
        """
        request = parse(OrderUpdate, patch)
        fields = request.model_dump(exclude_unset=True)
        status = fields.pop("status", None)

        if not fields and status is None:
            raise ValidationError("No update data provided", [{"field": "", "message": "empty patch", "code": "empty"}])

        if status is not None:
            return await self._move_status(order_id, OrderStatusUpdate(status=status), acting_user, fields)

        await self._write_fields(order_id, fields)
        return await self.get_order_by_id(order_id)

    async def _write_fields(self, order_id: int, fields: Dict[str, Any]) -> OrderModel:
        for attempt in range(1 + CONFLICT_RETRIES):
            _, version = await self.repo.read_status(order_id)
            updated = await self.repo.update_fields(order_id, version, fields)
            if updated is not None:
                logger.info(f"Order {order_id} updated: {sorted(fields)}")
                return updated
            logger.warning(f"Write conflict on order {order_id} update (attempt {attempt + 1})")

        raise ConcurrentModification(order_id)
