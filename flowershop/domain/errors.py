# flowershop/domain/errors.py
"""
Closed set of errors raised by the order core.

Callers branch on the exception class (or on ``code`` once serialized),
never on message text. Every error renders to a plain dict that the API
layer wraps in the ``{"success": false, "error": ...}`` envelope.
"""
from typing import Any, Dict, List


class OrderError(Exception):
    code = "order_error"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(OrderError):
    """Bad input shape, raised before any I/O."""

    code = "validation_error"
    http_status = 422

    def __init__(self, message: str, errors: List[Dict[str, str]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc, message: str = "Request validation failed") -> "ValidationError":
        # pydantic.ValidationError and fastapi.RequestValidationError both expose errors()
        errors = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
                "message": err.get("msg", ""),
                "code": err.get("type", "invalid"),
            }
            for err in exc.errors()
        ]
        return cls(message, errors)

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "errors": self.errors}


class ProductUnavailable(OrderError):
    code = "product_unavailable"
    http_status = 409

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found or inactive")
        self.product_id = product_id

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "product_id": self.product_id}


class InsufficientStock(OrderError):
    code = "insufficient_stock"
    http_status = 409

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class OrderRejected(OrderError):
    """
    Batched business-rule report for an order draft.

    Holds every ProductUnavailable / InsufficientStock found across the
    line items so the customer can fix the whole cart in one go.
    """

    code = "order_rejected"
    http_status = 409

    def __init__(self, errors: List[OrderError]):
        super().__init__(f"Order rejected: {len(errors)} line item problem(s)")
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "errors": [e.to_dict() for e in self.errors]}


class NotFound(OrderError):
    code = "not_found"
    http_status = 404

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "resource": self.resource, "id": self.resource_id}


class InvalidTransition(OrderError):
    code = "invalid_transition"
    http_status = 409

    def __init__(self, current: str, requested: str, valid_next: List[str]):
        allowed = ", ".join(valid_next) or "none (terminal status)"
        super().__init__(
            f"Cannot move order from '{current}' to '{requested}'. Allowed: {allowed}"
        )
        self.current = current
        self.requested = requested
        self.valid_next = valid_next

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "current": self.current,
            "requested": self.requested,
            "valid_next": self.valid_next,
        }


class ConcurrentModification(OrderError):
    code = "concurrent_modification"
    http_status = 409

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} was modified by another operation, reload and try again"
        )
        self.order_id = order_id

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "order_id": self.order_id}


class StorageFailure(OrderError):
    """Opaque infrastructure failure. The driver or HTTP exception is chained as __cause__."""

    code = "storage_failure"
    http_status = 503

    def __init__(self, operation: str):
        super().__init__(f"Storage failure during {operation}")
        self.operation = operation

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "operation": self.operation}
