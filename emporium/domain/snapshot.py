# emporium/domain/snapshot.py
"""
Projekcja koszyka (CartModel + pozycje) na snapshot CartOut.

- totals liczone zawsze z cen zapisanych w pozycjach (unit_price_snapshot)
- dane do wyswietlenia: najpierw zywy produkt, a jak zostal usuniety to snapshot
"""
import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from emporium.data.models.cart import CartModel
from emporium.data.models.cart_item import CartItemModel
from emporium.domain.schemas import CartItemOut, CartOut
from emporium.utils.settings import SHIPPING_FLAT_RATE, FREE_SHIPPING_THRESHOLD

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
UNKNOWN_TITLE = "Unknown Product"


def money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


class DisplaySource(str, enum.Enum):
    LIVE = "live"
    SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class ItemDisplay:
    source: DisplaySource
    title: str
    image_url: str | None
    category: str | None


def resolve_display(item: CartItemModel) -> ItemDisplay:
    product = item.product
    if product is not None:
        return ItemDisplay(
            source=DisplaySource.LIVE,
            title=product.title,
            image_url=product.image_url,
            category=product.category,
        )
    return ItemDisplay(
        source=DisplaySource.SNAPSHOT,
        title=item.title_snapshot or UNKNOWN_TITLE,
        image_url=item.image_url_snapshot,
        category=item.category_snapshot,
    )


@dataclass(frozen=True)
class CartTotals:
    total_before_discount: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    final_total: Decimal

    @property
    def total_after_discount(self) -> Decimal:
        return self.total_before_discount - self.discount_amount


def compute_totals(
    items: Iterable[CartItemModel],
    discount_amount=ZERO,
    shipping_flat_rate: Decimal = SHIPPING_FLAT_RATE,
    free_shipping_threshold: Decimal = FREE_SHIPPING_THRESHOLD,
) -> CartTotals:
    items = list(items)
    before = money(sum((money(i.unit_price_snapshot) * i.quantity for i in items), ZERO))

    # rabat nie moze przekroczyc wartosci koszyka
    discount = min(max(money(discount_amount), ZERO), before)
    after = before - discount

    shipping = ZERO
    if items and shipping_flat_rate > 0:
        free = free_shipping_threshold > 0 and after >= free_shipping_threshold
        shipping = ZERO if free else money(shipping_flat_rate)

    return CartTotals(
        total_before_discount=before,
        discount_amount=discount,
        shipping_cost=shipping,
        final_total=after + shipping,
    )


def to_item_out(item: CartItemModel) -> CartItemOut:
    display = resolve_display(item)
    unit_price = money(item.unit_price_snapshot)
    return CartItemOut(
        product_id=item.product_id,
        title=display.title,
        image_url=display.image_url,
        category=display.category,
        quantity=item.quantity,
        unit_price=unit_price,
        line_total=unit_price * item.quantity,
        display_source=display.source.value,
    )


def to_cart_out(cart: CartModel) -> CartOut:
    items = [to_item_out(i) for i in cart.items]
    before = money(cart.total_before_discount)
    discount = money(cart.discount_amount)

    return CartOut(
        cart_id=cart.id,
        user_id=cart.user_id,
        status=cart.status,
        items=items,
        item_count=len(items),
        total_quantity=sum(i.quantity for i in items),
        total_before_discount=before,
        discount_amount=discount,
        total_after_discount=before - discount,
        shipping_cost=money(cart.shipping_cost),
        final_total=money(cart.final_total),
        created_at=cart.created_at,
        updated_at=cart.updated_at,
        expires_at=cart.expires_at,
    )
