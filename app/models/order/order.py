from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TYPE_CHECKING
import uuid
import hashlib
from sqlmodel import JSON, Field, Relationship, SQLModel
from sqlalchemy import Column, Enum

from app.enums.order_status import OrderStatus

if TYPE_CHECKING:
    from app.models.user.user import User

ORDER_CODE_HASH_LENGTH = 10

def generate_order_code() -> str:
    timestamp = datetime.now(timezone.utc).isoformat()
    raw = f"{timestamp}-{uuid.uuid4()}"
    return hashlib.sha256(raw.encode()).hexdigest()[:ORDER_CODE_HASH_LENGTH].upper()

class Order(SQLModel, table=True):
    __tablename__ = "tb_order"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="tb_user.id")
    user: Optional["User"] = Relationship(back_populates="orders")

    code: str = Field(default_factory=generate_order_code, index=True, unique=True)

    status: OrderStatus = Field(default=OrderStatus.PENDING, sa_column=Column(Enum(OrderStatus), nullable=False))

    # Cart snapshot: [{productId, categoryId, price, quantity}]
    items: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    total_amount: float = Field(default=0.0)
    total_amount_with_discount: float = Field(default=0.0)

    discount_code: Optional[str] = Field(default=None, index=True)
    discount_value: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
