"""
Unit tests for snapshot assembly: totals and display-data resolution.
"""
from decimal import Decimal
from types import SimpleNamespace

from emporium.domain.snapshot import DisplaySource, compute_totals, resolve_display


def _item(price, quantity, product=None, **snapshots):
    return SimpleNamespace(
        unit_price_snapshot=Decimal(price),
        quantity=quantity,
        product=product,
        title_snapshot=snapshots.get("title"),
        image_url_snapshot=snapshots.get("image_url"),
        category_snapshot=snapshots.get("category"),
    )


class TestComputeTotals:

    def test_empty_cart_has_no_shipping(self):
        totals = compute_totals([], shipping_flat_rate=Decimal("9.99"))

        assert totals.total_before_discount == Decimal("0.00")
        assert totals.shipping_cost == Decimal("0.00")
        assert totals.final_total == Decimal("0.00")

    def test_flat_rate_shipping_is_added(self):
        items = [_item("19.99", 2), _item("5.00", 1)]

        totals = compute_totals(items, shipping_flat_rate=Decimal("7.50"))

        assert totals.total_before_discount == Decimal("44.98")
        assert totals.shipping_cost == Decimal("7.50")
        assert totals.final_total == Decimal("52.48")

    def test_free_shipping_above_threshold(self):
        items = [_item("60.00", 1)]

        totals = compute_totals(
            items,
            shipping_flat_rate=Decimal("7.50"),
            free_shipping_threshold=Decimal("50.00"),
        )

        assert totals.shipping_cost == Decimal("0.00")
        assert totals.final_total == Decimal("60.00")

    def test_discount_is_clamped_to_the_cart_value(self):
        totals = compute_totals([_item("10.00", 1)], discount_amount=Decimal("25.00"))

        assert totals.discount_amount == Decimal("10.00")
        assert totals.total_after_discount == Decimal("0.00")
        assert totals.final_total == Decimal("0.00")

    def test_discount_reduces_final_total(self):
        totals = compute_totals([_item("100.00", 5)], discount_amount=Decimal("50.00"))

        assert totals.total_before_discount == Decimal("500.00")
        assert totals.total_after_discount == Decimal("450.00")
        assert totals.final_total == Decimal("450.00")


class TestResolveDisplay:

    def test_live_product_wins(self):
        product = SimpleNamespace(title="Live Title", image_url="live.png", category="books")
        item = _item("1.00", 1, product=product, title="Snapshot Title", image_url="old.png")

        display = resolve_display(item)

        assert display.source is DisplaySource.LIVE
        assert display.title == "Live Title"
        assert display.image_url == "live.png"
        assert display.category == "books"

    def test_snapshot_when_product_is_gone(self):
        item = _item("1.00", 1, title="Snapshot Title", image_url="old.png", category="toys")

        display = resolve_display(item)

        assert display.source is DisplaySource.SNAPSHOT
        assert display.title == "Snapshot Title"
        assert display.image_url == "old.png"
        assert display.category == "toys"

    def test_unknown_title_without_any_source(self):
        display = resolve_display(_item("1.00", 1))

        assert display.source is DisplaySource.SNAPSHOT
        assert display.title == "Unknown Product"
