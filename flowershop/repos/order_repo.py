# flowershop/repos/order_repo.py
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flowershop.data.models.order import OrderModel
from flowershop.data.models.order_item import OrderItemModel
from flowershop.data.models.order_status_history import OrderStatusHistoryModel
from flowershop.domain.errors import NotFound, StorageFailure
from flowershop.domain.schemas import OrderQuery
from flowershop.utils.logging import get_logger

logger = get_logger(__name__)

_SORT_COLUMNS = {
    "created_at": OrderModel.created_at,
    "total_amount": OrderModel.total_amount,
    "status": OrderModel.status,
}


class OrderRepo:
    """
    All order writes go through here, each one a single transaction.

    Status changes use compare-and-write on (status, version): a write that
    matches zero rows means someone else got there first and nothing is
    changed.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _rollback(self, operation: str, e: Exception):
        logger.error(f"{operation} failed, rolling back: {e}")
        await self.db.rollback()

    # =====================================================
    # WRITES
    # =====================================================
    async def create(
        self,
        order: OrderModel,
        items: List[OrderItemModel],
        initial_history: OrderStatusHistoryModel,
    ) -> OrderModel:
        order.items = items
        order.status_history = [initial_history]
        try:
            self.db.add(order)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("order create", e)
            raise StorageFailure("order create") from e

        return await self.read(order.id)

    async def apply_transition(
        self,
        order_id: int,
        expected_status: str,
        expected_version: int,
        history: OrderStatusHistoryModel,
        fields: Dict[str, Any] | None = None,
    ) -> OrderModel | None:
        """
        Move the order to ``history.new_status`` only if it is still at
        ``expected_status``/``expected_version``. Returns None on a lost race.

        ``fields`` (admin patch columns) go out in the same UPDATE, so they
        are stored only together with the status change.
        """
        now = history.created_at or datetime.now(timezone.utc)
        history.created_at = now
        try:
            stmt = (
                update(OrderModel)
                .where(
                    OrderModel.id == order_id,
                    OrderModel.status == expected_status,
                    OrderModel.version == expected_version,
                )
                .values(
                    **(fields or {}),
                    status=history.new_status,
                    version=expected_version + 1,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)

            if result.rowcount == 0:
                await self.db.rollback()
                return None

            history.order_id = order_id
            self.db.add(history)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("status transition", e)
            raise StorageFailure("status transition") from e

        return await self.read(order_id)

    async def update_fields(
        self,
        order_id: int,
        expected_version: int,
        fields: Dict[str, Any],
    ) -> OrderModel | None:
        try:
            stmt = (
                update(OrderModel)
                .where(OrderModel.id == order_id, OrderModel.version == expected_version)
                .values(
                    **fields,
                    version=expected_version + 1,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)

            if result.rowcount == 0:
                await self.db.rollback()
                return None

            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("order update", e)
            raise StorageFailure("order update") from e

        return await self.read(order_id)

    # =====================================================
    # READS
    # =====================================================
    async def read(self, order_id: int) -> OrderModel:
        """Order with items, payments and history, loaded in one round of batched selects."""
        stmt = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(
                selectinload(OrderModel.items),
                selectinload(OrderModel.payments),
                selectinload(OrderModel.status_history),
            )
            .execution_options(populate_existing=True)
        )
        try:
            order = (await self.db.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"order read failed: {e}")
            raise StorageFailure("order read") from e

        if order is None:
            raise NotFound("Order", order_id)
        return order

    async def read_status(self, order_id: int) -> Tuple[str, int]:
        """Current (status, version) straight from the table, bypassing the identity map."""
        stmt = select(OrderModel.status, OrderModel.version).where(OrderModel.id == order_id)
        try:
            row = (await self.db.execute(stmt)).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"order status read failed: {e}")
            raise StorageFailure("order status read") from e

        if row is None:
            raise NotFound("Order", order_id)
        return row.status, row.version

    async def history(self, order_id: int) -> List[OrderStatusHistoryModel]:
        stmt = (
            select(OrderStatusHistoryModel)
            .where(OrderStatusHistoryModel.order_id == order_id)
            .order_by(OrderStatusHistoryModel.created_at, OrderStatusHistoryModel.id)
        )
        try:
            exists = await self.db.scalar(select(OrderModel.id).where(OrderModel.id == order_id))
            if exists is None:
                raise NotFound("Order", order_id)
            return list((await self.db.execute(stmt)).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"status history read failed: {e}")
            raise StorageFailure("status history read") from e

    async def list_orders(self, query: OrderQuery) -> Tuple[List[OrderModel], int]:
        """One page of orders plus the count of every order matching the same filters."""
        filters = _filters(query)

        sort_col = _SORT_COLUMNS[query.sort_by]
        ordering = sort_col.asc() if query.sort_direction == "asc" else sort_col.desc()
        tiebreak = OrderModel.id.asc() if query.sort_direction == "asc" else OrderModel.id.desc()

        page_stmt = (
            select(OrderModel)
            .where(*filters)
            .options(selectinload(OrderModel.items))
            .order_by(ordering, tiebreak)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        count_stmt = select(func.count()).select_from(OrderModel).where(*filters)

        try:
            total = await self.db.scalar(count_stmt)
            orders = list((await self.db.execute(page_stmt)).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"order list failed: {e}")
            raise StorageFailure("order list") from e

        return orders, total or 0


def _filters(query: OrderQuery) -> list:
    filters = []
    if query.user_id is not None:
        filters.append(OrderModel.user_id == query.user_id)
    if query.status is not None:
        filters.append(OrderModel.status == query.status.value)
    if query.customer_email:
        filters.append(OrderModel.customer_email.ilike(f"%{query.customer_email}%"))
    if query.customer_name:
        filters.append(OrderModel.customer_name.ilike(f"%{query.customer_name}%"))
    if query.date_from is not None:
        start = datetime.combine(query.date_from, time.min, tzinfo=timezone.utc)
        filters.append(OrderModel.created_at >= start)
    if query.date_to is not None:
        # inclusive: everything before the next midnight
        end = datetime.combine(query.date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
        filters.append(OrderModel.created_at < end)
    return filters
