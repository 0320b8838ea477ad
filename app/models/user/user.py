from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.order.order import Order

class User(SQLModel, table=True):
    __tablename__ = "tb_user"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: Optional[str] = Field(default=None)
    username: Optional[str] = Field(default=None, index=True, unique=True)
    password_hash: Optional[str] = Field(default=None)
    email: Optional[str] = Field(default=None)

    role: str = Field(default="customer")

    is_admin: bool = Field(default=False)
    is_active: bool = Field(default=True)
    last_login: Optional[datetime] = None

    orders: List["Order"] = Relationship(back_populates="user")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: Optional[datetime] = Field(default=None)
