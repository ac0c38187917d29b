from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from flowershop.data.database import Base
from flowershop.data.models.order import utc_now


class OrderStatusHistoryModel(Base):
    """Append-only. Rows are inserted with the transition and never touched again."""

    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    old_status = Column(String(20), nullable=True)  # NULL only for the creation row
    new_status = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
    changed_by = Column(Integer, nullable=True)  # NULL = system

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    order = relationship("OrderModel", back_populates="status_history")
