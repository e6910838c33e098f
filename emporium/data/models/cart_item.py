#emporium/data/models/cart_item.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, DateTime, Numeric, Uuid, ForeignKey,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship

from emporium.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Uuid, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    # bez FK - pozycja zostaje w koszyku nawet jak produkt zostanie usuniety
    product_id = Column(Uuid, nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price_snapshot = Column(Numeric(10, 2), nullable=False)
    title_snapshot = Column(String(255), nullable=True)
    image_url_snapshot = Column(String(500), nullable=True)
    category_snapshot = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_now)

    cart = relationship("CartModel", back_populates="items")
    product = relationship(
        "ProductModel",
        primaryjoin="foreign(CartItemModel.product_id) == ProductModel.id",
        viewonly=True,
    )

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_item_qty"),
    )
