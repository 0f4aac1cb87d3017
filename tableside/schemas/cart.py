from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# Keeps quantities well inside a 32-bit INTEGER column
MAX_QUANTITY = 1000


class CartLineCreate(BaseModel):
    table_id: int = Field(gt=0)
    menu_id: int = Field(gt=0)
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)


class CartLineUpdate(BaseModel):
    table_id: int = Field(gt=0)
    menu_id: int = Field(gt=0)
    # Anything below 1 removes the line
    quantity: int = Field(le=MAX_QUANTITY)


class CartLineResponse(BaseModel):
    menu_id: int
    item_name: str
    price: Decimal
    quantity: int
    line_total: Decimal
    added_at: datetime
    is_available: bool = True


class CartResponse(BaseModel):
    message: str
    cart: list[CartLineResponse]
