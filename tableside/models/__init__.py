# Import all models here so SQLAlchemy registers them with Base.metadata
from tableside.models.cart import CartLine
from tableside.models.menu_item import MenuItem
from tableside.models.order import Order, OrderItem, OrderStatus
from tableside.models.payment import Payment, PaymentStatus

__all__ = [
    "CartLine",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentStatus",
]
