# import every model so SQLAlchemy registers it in Base.metadata

from flowershop.data.models.order import OrderModel
from flowershop.data.models.order_item import OrderItemModel
from flowershop.data.models.order_status_history import OrderStatusHistoryModel
from flowershop.data.models.payment import PaymentModel

__all__ = ["OrderModel", "OrderItemModel", "OrderStatusHistoryModel", "PaymentModel"]
