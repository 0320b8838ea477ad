from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.enums.order_status import OrderStatus
from app.schemas.company.promocode import CartItemSnapshot


class OrderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[CartItemSnapshot] = Field(min_length=1)
    promo_code: Optional[str] = Field(default=None, alias="promoCode")


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    user_id: int
    status: OrderStatus
    items: List[dict]
    total_amount: float
    total_amount_with_discount: float
    discount_code: Optional[str]
    discount_value: float
    created_at: datetime
    promo_code_error: Optional[str] = None
