"""Tests for unit price resolution."""

import math

from factories import make_product

from storefront.catalogue.pricing import as_price, checkout_unit_price, resolve_price


class TestResolvePrice:
    def test_variant_override_wins(self):
        product = {"sale_price": 300, "base_price": 400}
        variant = {"price_override": 250, "price": 500}
        assert resolve_price(product, variant) == 250.0

    def test_variant_price_before_product_prices(self):
        assert resolve_price({"sale_price": 300}, {"price": 500}) == 500.0

    def test_product_sale_price_then_base_then_price(self):
        assert resolve_price({"sale_price": 300, "base_price": 400, "price": 450}) == 300.0
        assert resolve_price({"base_price": 400, "price": 450}) == 400.0
        assert resolve_price({"price": 450}) == 450.0

    def test_zero_is_a_valid_price(self):
        assert resolve_price({"base_price": 400}, {"price": 0}) == 0.0

    def test_non_numeric_values_are_skipped(self):
        product = {"sale_price": "300", "base_price": math.nan, "price": 120}
        variant = {"price_override": None, "price": True}
        assert resolve_price(product, variant) == 120.0

    def test_nothing_numeric_resolves_to_zero(self):
        assert resolve_price({}, None) == 0.0
        assert resolve_price(None) == 0.0

    def test_works_on_aggregates(self):
        product = make_product(base_price=900.0)
        assert resolve_price(product, product.variant_for("CLS-M-WHT")) == 500.0
        assert resolve_price(product) == 900.0


class TestCheckoutUnitPrice:
    def test_variant_sale_price_first(self):
        assert checkout_unit_price({}, {"sale_price": 450, "price": 500}) == 450.0

    def test_falls_back_to_variant_price(self):
        assert checkout_unit_price({}, {"price": 500}) == 500.0

    def test_falls_back_to_resolution_chain(self):
        assert checkout_unit_price({"base_price": 700}, {}) == 700.0


def test_as_price_rejects_infinity_and_bools():
    assert as_price(math.inf) is None
    assert as_price(False) is None
    assert as_price(12) == 12.0
