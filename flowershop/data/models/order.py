from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from flowershop.data.database import Base


def utc_now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=True, index=True)

    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(32), nullable=True)

    delivery_address = Column(String(500), nullable=False)
    delivery_city = Column(String(100), nullable=True)
    delivery_state = Column(String(100), nullable=True)
    delivery_zip = Column(String(20), nullable=True)
    delivery_date = Column(Date, nullable=True)
    delivery_time_slot = Column(String(50), nullable=True)
    delivery_notes = Column(Text, nullable=True)

    notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, confirmed, processing, shipped, delivered, cancelled
    total_amount = Column(Numeric(10, 2), nullable=False)
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.id",
    )
    status_history = relationship(
        "OrderStatusHistoryModel",
        back_populates="order",
        order_by="OrderStatusHistoryModel.id",  # insertion order == chronological order
    )
    payments = relationship(
        "PaymentModel",
        back_populates="order",
        order_by="PaymentModel.id",
    )

    @property
    def payment_verified(self) -> bool:
        # requires payments to be loaded
        return any(p.status == "confirmed" for p in self.payments)
