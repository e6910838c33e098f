#emporium/data/models/product.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Uuid, CheckConstraint

from emporium.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    category = Column(String(100), nullable=True)

    # total - wszystko co bylo na stanie, available - nie zarezerwowane przez koszyki
    inventory_total = Column(Integer, nullable=False, default=0)
    inventory_available = Column(Integer, nullable=False, default=0)

    # optimistic locking na stanach magazynowych
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_now)

    __table_args__ = (
        CheckConstraint(
            "inventory_available >= 0 AND inventory_available <= inventory_total",
            name="ck_products_inventory",
        ),
    )

    def __repr__(self):
        return f"<Product {self.id} available={self.inventory_available}/{self.inventory_total}>"
