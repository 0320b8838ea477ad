from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlmodel import SQLModel

from app.enums.discount_type import DiscountType


class CartItemSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId", min_length=1)
    category_id: str = Field(alias="categoryId")
    price: float = Field(gt=0)
    quantity: int = Field(gt=0)


class PromoCodeValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    cart_items: List[CartItemSnapshot] = Field(alias="cartItems", min_length=1)
    subtotal: float = Field(gt=0)

    @field_validator("code")
    @classmethod
    def code_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Promotional code must not be empty")
        return v.strip()


# Columns that cannot hold NULL, so an update may not clear them
NON_NULLABLE_UPDATE_FIELDS = (
    "discount_type",
    "discount_value",
    "applicable_products",
    "applicable_categories",
    "excluded_products",
    "is_active",
)


def check_discount_and_window(
    discount_type: DiscountType,
    discount_value: float,
    valid_from: Optional[datetime],
    valid_until: Optional[datetime],
):
    """Rules shared by create and update; raises ValueError on the first broken one."""
    if discount_type == DiscountType.PERCENTAGE and discount_value > 100:
        raise ValueError("A percentage discount cannot exceed 100")
    if valid_from and valid_until and valid_from > valid_until:
        raise ValueError("valid_from must be before valid_until")


class PromoCodeCreate(SQLModel):
    code: str = Field(min_length=1, max_length=32)
    name: Optional[str] = None
    description: Optional[str] = None
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: float = Field(gt=0)
    min_order_value: Optional[float] = Field(default=None, ge=0)
    max_discount: Optional[float] = Field(default=None, gt=0)
    applicable_products: List[str] = []
    applicable_categories: List[str] = []
    excluded_products: List[str] = []
    max_uses: Optional[int] = Field(default=None, gt=0)
    per_user_limit: Optional[int] = Field(default=None, gt=0)
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    @model_validator(mode="after")
    def check_rules(self):
        check_discount_and_window(self.discount_type, self.discount_value, self.valid_from, self.valid_until)
        return self


class PromoCodeUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(default=None, gt=0)
    min_order_value: Optional[float] = Field(default=None, ge=0)
    max_discount: Optional[float] = Field(default=None, gt=0)
    applicable_products: Optional[List[str]] = None
    applicable_categories: Optional[List[str]] = None
    excluded_products: Optional[List[str]] = None
    max_uses: Optional[int] = Field(default=None, gt=0)
    per_user_limit: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        cleared = [key for key in NON_NULLABLE_UPDATE_FIELDS if key in self.model_fields_set and getattr(self, key) is None]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class PromoCodeResponse(SQLModel):
    id: int
    code: str
    name: Optional[str]
    description: Optional[str]
    discount_type: DiscountType
    discount_value: float
    min_order_value: Optional[float]
    max_discount: Optional[float]
    applicable_products: List[str]
    applicable_categories: List[str]
    excluded_products: List[str]
    max_uses: Optional[int]
    per_user_limit: Optional[int]
    current_uses: int
    is_active: bool
    valid_from: Optional[datetime]
    valid_until: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class PromoCodeStats(BaseModel):
    promo_code_id: int
    code: str
    total_usage: int
    recent_usage: int
    total_discount: float
    unique_users: int
