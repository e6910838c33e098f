#emporium/data/models/cart.py
import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Uuid, Index, text
from sqlalchemy.orm import relationship

from emporium.data.database import Base


class CartStatus(str, enum.Enum):
    ACTIVE = "Active"
    CHECKED_OUT = "CheckedOut"
    ABANDONED = "Abandoned"


def _now():
    return datetime.now(timezone.utc)


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)

    status = Column(String(20), nullable=False, default=CartStatus.ACTIVE.value)
    version = Column(Integer, nullable=False, default=1)

    total_before_discount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    discount_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    final_total = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
    )

    # max jeden aktywny koszyk na usera
    __table_args__ = (
        Index(
            "uq_carts_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'Active'"),
            sqlite_where=text("status = 'Active'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == CartStatus.ACTIVE.value
