# emporium/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime
from uuid import UUID


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: UUID = Field(..., description="ID produktu")
    quantity: int = Field(..., gt=0, description="Ilosc produktu (musi byc > 0)")


class QuantityIn(BaseModel):
    """Schema dla zmiany ilosci; 0 usuwa pozycje z koszyka."""

    quantity: int = Field(..., ge=0, description="Nowa ilosc produktu (>= 0)")


class CreateCartIn(BaseModel):
    """Schema dla tworzenia koszyka."""

    user_id: UUID = Field(..., description="ID uzytkownika")


class CartItemOut(BaseModel):
    """Schema dla produktu w koszyku (response)."""

    product_id: UUID
    title: str
    image_url: str | None = None
    category: str | None = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    display_source: str


class CartOut(BaseModel):
    """Snapshot koszyka zwracany przez kazda operacje."""

    cart_id: UUID
    user_id: UUID
    status: str
    items: List[CartItemOut]
    item_count: int
    total_quantity: int
    total_before_discount: Decimal
    discount_amount: Decimal
    total_after_discount: Decimal
    shipping_cost: Decimal
    final_total: Decimal
    created_at: datetime
    updated_at: datetime | None = None
    expires_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
