from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field, SQLModel


class PromoCodeRedemption(SQLModel, table=True):
    __tablename__ = "tb_promocode_redemption"
    __table_args__ = (
        UniqueConstraint("promo_code_id", "order_id", name="uq_promocode_redemption_code_order"),
        Index("ix_promocode_redemption_code_user", "promo_code_id", "user_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    promo_code_id: int = Field(foreign_key="tb_promocode.id")
    user_id: int = Field(foreign_key="tb_user.id")
    order_id: int = Field(foreign_key="tb_order.id")
    discount_amount: float = Field(default=0.0, ge=0)

    redeemed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
