from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from flowershop.data.database import Base
from flowershop.data.models.order import utc_now


class PaymentModel(Base):
    """
    Written by the payment subsystem (proof upload and admin verification).
    The order core only reads it for the nested order view.
    """

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    payment_method_name = Column(String(100), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, failed, refunded
    reference_number = Column(String(255), nullable=True)
    receipt_image_url = Column(String(255), nullable=True)
    admin_notes = Column(Text, nullable=True)

    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    order = relationship("OrderModel", back_populates="payments")
