"""Unit tests for the Product aggregate."""

from decimal import Decimal

import pytest

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money


class TestProductCreate:

    def test_happy_path(self):
        p = Product.create("Widget", "A small widget", "5.00", 10)
        assert p.id is None
        assert p.name == "Widget"
        assert p.price == Money.of("5.00")
        assert p.stock == 10
        assert not p.is_deleted

    def test_accepts_money_price(self):
        p = Product.create("Widget", "", Money.of("2"), 0)
        assert p.price.amount == Decimal("2")

    def test_zero_price_and_stock_allowed(self):
        p = Product.create("Freebie", "", 0, 0)
        assert p.price.amount == 0
        assert p.stock == 0

    def test_name_is_trimmed(self):
        assert Product.create("  Widget ", "", "1", 1).name == "Widget"

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError, match="name is required"):
            Product.create("", "", "1", 1)

    def test_too_long_name_rejected(self):
        with pytest.raises(ValidationError, match="at most 255"):
            Product.create("n" * 256, "", "1", 1)

    def test_too_long_description_rejected(self):
        with pytest.raises(ValidationError, match="at most 1000"):
            Product.create("Widget", "d" * 1001, "1", 1)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Product.create("Widget", "", "-0.01", 1)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="stock cannot be negative"):
            Product.create("Widget", "", "1", -1)

    def test_non_integer_stock_rejected(self):
        with pytest.raises(ValidationError, match="stock must be an integer"):
            Product.create("Widget", "", "1", 1.5)

    @pytest.mark.parametrize("name", [None, 42, ["Widget"]])
    def test_non_text_name_rejected(self, name):
        with pytest.raises(ValidationError, match="name must be text"):
            Product.create(name, "", "1", 1)

    def test_non_text_description_rejected(self):
        with pytest.raises(ValidationError, match="description must be text"):
            Product.create("Widget", 12, "1", 1)


class TestProductRevise:

    def test_replaces_all_fields(self):
        p = Product.create("Widget", "old", "5.00", 10)
        p.revise("Gadget", "new", "7.25", 3)
        assert (p.name, p.description, p.price, p.stock) == (
            "Gadget", "new", Money.of("7.25"), 3,
        )

    def test_invalid_revision_leaves_product_untouched(self):
        p = Product.create("Widget", "old", "5.00", 10)
        with pytest.raises(ValidationError):
            p.revise("Gadget", "new", "7.25", -1)
        assert (p.name, p.stock) == ("Widget", 10)

    def test_tombstone(self):
        p = Product.create("Widget", "", "5.00", 10)
        p.tombstone()
        assert p.is_deleted
