# flowershop/domain/schemas.py
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flowershop.domain.status import OrderStatus
from flowershop.utils.settings import ORDERS_DEFAULT_PAGE_SIZE, ORDERS_MAX_PAGE_SIZE

EMAIL_PATTERN = r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9\-]+(\.[A-Za-z0-9\-]+)*\.[A-Za-z]{2,}$"
PHONE_RE = re.compile(r"^\+?\d{10,15}$")

T = TypeVar("T")


class OrderItemIn(BaseModel):
    """Pozycja zamowienia od klienta. Cena zawsze z katalogu."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia."""

    # client-side unit_price / total fields are dropped here
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    user_id: Optional[int] = Field(None, gt=0)
    customer_name: str = Field(..., min_length=2, max_length=100)
    customer_email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    customer_phone: Optional[str] = None

    delivery_address: str = Field(..., min_length=10, max_length=500)
    delivery_city: Optional[str] = Field(None, max_length=100)
    delivery_state: Optional[str] = Field(None, max_length=100)
    delivery_zip: Optional[str] = Field(None, max_length=20)
    delivery_date: Optional[date] = None
    delivery_time_slot: Optional[str] = Field(None, max_length=50)
    delivery_notes: Optional[str] = None
    notes: Optional[str] = None

    items: List[OrderItemIn] = Field(..., min_length=1)

    @field_validator("customer_phone")
    @classmethod
    def _check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        compact = re.sub(r"\s", "", value)
        if not PHONE_RE.match(compact):
            raise ValueError("phone must be 10-15 digits, optionally prefixed with +")
        return compact


class OrderUpdate(BaseModel):
    """Admin patch. Only scheduling and annotation fields, status goes through the state machine."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[OrderStatus] = None
    delivery_date: Optional[date] = None
    delivery_time_slot: Optional[str] = Field(None, max_length=50)
    delivery_notes: Optional[str] = None
    admin_notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=500)


class OrderQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(ORDERS_DEFAULT_PAGE_SIZE, ge=1, le=ORDERS_MAX_PAGE_SIZE)
    user_id: Optional[int] = Field(None, gt=0)
    status: Optional[OrderStatus] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort_by: Literal["created_at", "total_amount", "status"] = "created_at"
    sort_direction: Literal["asc", "desc"] = "desc"


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_summary: Optional[str] = None
    unit_price: Decimal
    quantity: int
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class StatusHistoryOut(BaseModel):
    id: int
    order_id: int
    old_status: Optional[OrderStatus] = None
    new_status: OrderStatus
    notes: Optional[str] = None
    changed_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentOut(BaseModel):
    id: int
    payment_method_name: str
    amount: Decimal
    status: str
    reference_number: Optional[str] = None
    receipt_image_url: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    user_id: Optional[int] = None
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    delivery_address: str
    delivery_city: Optional[str] = None
    delivery_state: Optional[str] = None
    delivery_zip: Optional[str] = None
    delivery_date: Optional[date] = None
    delivery_time_slot: Optional[str] = None
    delivery_notes: Optional[str] = None
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    status: OrderStatus
    total_amount: Decimal
    version: int
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(OrderOut):
    payments: List[PaymentOut] = []
    status_history: List[StatusHistoryOut] = []
    payment_verified: bool = False


class PaginationOut(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class OrderListOut(BaseModel):
    orders: List[OrderOut]
    pagination: PaginationOut


class Envelope(BaseModel, Generic[T]):
    """Uniform response body: {success, data, message}."""

    success: bool = True
    data: T
    message: Optional[str] = None


def error_envelope(error: dict[str, Any]) -> dict[str, Any]:
    return {"success": False, "error": error}
