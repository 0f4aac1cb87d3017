from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tableside.models.order import OrderStatus
from tableside.models.payment import PaymentStatus


class PlaceOrderRequest(BaseModel):
    table_id: int = Field(gt=0)
    # Free-form label, e.g. "cash" or "upi"; not checked against a fixed set
    payment_mode: str = Field(min_length=1, max_length=50)


class PlaceOrderResponse(BaseModel):
    message: str
    order_id: int
    total_amount: Decimal


class OrderSummaryResponse(BaseModel):
    order_id: int
    table_id: int
    total_amount: Decimal
    order_time: datetime
    status: OrderStatus
    payment_method: str | None
    payment_status: PaymentStatus | None


class OrderItemResponse(BaseModel):
    menu_id: int
    item_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class PaymentResponse(BaseModel):
    amount: Decimal
    payment_method: str
    payment_status: PaymentStatus
    created_at: datetime


class OrderDetailResponse(BaseModel):
    order_id: int
    table_id: int
    total_amount: Decimal
    order_time: datetime
    status: OrderStatus
    items: list[OrderItemResponse]
    payment: PaymentResponse | None
