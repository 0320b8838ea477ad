from datetime import datetime, timezone
from typing import List, Optional
from sqlmodel import JSON, Column, Field, SQLModel
from sqlalchemy import Enum

from app.enums.discount_type import DiscountType


class PromoCode(SQLModel, table=True):
    __tablename__ = "tb_promocode"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True, max_length=32)
    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)

    discount_type: DiscountType = Field(
        default=DiscountType.PERCENTAGE,
        sa_column=Column(Enum(DiscountType), nullable=False),
    )
    discount_value: float = Field(gt=0)
    min_order_value: Optional[float] = Field(default=None, ge=0)
    max_discount: Optional[float] = Field(default=None, gt=0)

    # Empty lists mean "no restriction"
    applicable_products: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    applicable_categories: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    excluded_products: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    max_uses: Optional[int] = Field(default=None, gt=0)
    per_user_limit: Optional[int] = Field(default=None, gt=0)
    current_uses: int = Field(default=0, ge=0)

    is_active: bool = Field(default=True)
    valid_from: Optional[datetime] = Field(default=None)
    valid_until: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: Optional[datetime] = Field(default=None)
