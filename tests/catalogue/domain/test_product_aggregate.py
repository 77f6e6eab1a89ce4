"""Tests for the Product aggregate: variants, availability and stock adjustments."""

import pytest
from factories import make_product
from protean.exceptions import ValidationError

from storefront.catalogue.events import VariantPriceChanged, VariantStockAdjusted
from storefront.catalogue.product import ProductStatus
from storefront.errors import InsufficientStock, VariantNotFound


class TestProductCreation:
    def test_slug_is_normalized(self):
        product = make_product(slug="  Classic-Linen-Shirt ")
        assert product.slug == "classic-linen-shirt"

    def test_new_products_are_active(self):
        assert make_product().is_available is True

    def test_archived_product_is_unavailable(self):
        product = make_product(status=ProductStatus.ARCHIVED.value)
        assert product.is_available is False

    def test_variant_skus_must_be_unique(self):
        product = make_product()
        with pytest.raises(ValidationError):
            product.add_variant(sku="cls-m-wht", size="M", color="White", price=500.0)


class TestVariantLookup:
    def test_lookup_is_case_insensitive(self):
        product = make_product()
        assert product.variant_for("cls-m-wht").sku == "CLS-M-WHT"

    def test_unknown_sku_returns_none(self):
        assert make_product().variant_for("NOPE") is None

    def test_total_stock_sums_variants(self):
        product = make_product(
            variants=(("A-S", "S", "Red", 100.0, 3), ("A-M", "M", "Red", 100.0, 4)),
        )
        assert product.total_stock == 7

    def test_primary_image_prefers_variant_image(self):
        product = make_product()
        variant = product.variant_for("CLS-M-WHT")
        assert product.primary_image(variant) == product.image_url

        variant.image_url = "https://cdn.example.com/white.jpg"
        assert product.primary_image(variant) == "https://cdn.example.com/white.jpg"


class TestStockAdjustment:
    def test_decrement_counts_as_sale(self):
        product = make_product()
        product.adjust_stock("CLS-M-WHT", -3)

        assert product.variant_for("CLS-M-WHT").stock == 7
        assert product.total_sold == 3

    def test_increment_reverses_sale(self):
        product = make_product()
        product.adjust_stock("CLS-M-WHT", -3)
        product.adjust_stock("CLS-M-WHT", 3)

        assert product.variant_for("CLS-M-WHT").stock == 10
        assert product.total_sold == 0

    def test_total_sold_never_goes_negative(self):
        product = make_product()
        product.adjust_stock("CLS-M-WHT", 5)
        assert product.total_sold == 0

    def test_restock_without_sales_tracking(self):
        product = make_product()
        product.adjust_stock("CLS-M-WHT", -2)
        product.adjust_stock("CLS-M-WHT", 2, track_sales=False)
        assert product.total_sold == 2

    def test_cannot_go_below_zero(self):
        product = make_product()
        with pytest.raises(InsufficientStock) as exc:
            product.adjust_stock("CLS-M-WHT", -11)

        assert exc.value.available == 10
        assert exc.value.requested == 11
        assert product.variant_for("CLS-M-WHT").stock == 10

    def test_unknown_variant(self):
        with pytest.raises(VariantNotFound):
            make_product().adjust_stock("NOPE", -1)

    def test_adjustment_raises_event(self):
        product = make_product()
        product.adjust_stock("CLS-M-WHT", -1)

        event = product._events[-1]
        assert isinstance(event, VariantStockAdjusted)
        assert event.delta == -1
        assert event.stock == 9


class TestPriceChange:
    def test_change_variant_price(self):
        product = make_product()
        product.change_variant_price("CLS-M-WHT", price=650.0)

        assert product.variant_for("CLS-M-WHT").price == 650.0
        assert isinstance(product._events[-1], VariantPriceChanged)
        assert product._events[-1].previous_price == 500.0
