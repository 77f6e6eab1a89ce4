import pytest
from factories import make_product

from storefront.errors import NotFound
from storefront.wishlist.events import WishlistItemAdded, WishlistSynced
from storefront.wishlist.wishlist import Wishlist, WishlistPriority


@pytest.fixture
def product():
    return make_product(
        variants=(
            ("CLS-M-WHT", "M", "White", 500.0, 10),
            ("CLS-L-BLU", "L", "Blue", 650.0, 0),
        )
    )


@pytest.fixture
def wishlist():
    return Wishlist.create(customer_id="cust-1")


class TestAddItem:
    def test_variant_item_snapshots_variant(self, wishlist, product):
        item = wishlist.add_item(product, product.variant_for("CLS-M-WHT"), priority="high", notes="for Diwali")

        assert item.variant_sku == "CLS-M-WHT"
        assert item.price == 500.0
        assert item.size == "M"
        assert item.in_stock is True
        assert item.priority == WishlistPriority.HIGH.value
        assert wishlist.item_count == 1
        assert isinstance(wishlist._events[-1], WishlistItemAdded)

    def test_product_level_item_uses_total_stock(self, wishlist):
        product = make_product(base_price=900.0, variants=(("CLS-M-WHT", "M", "White", None, 0),))
        item = wishlist.add_item(product)

        assert item.variant_sku is None
        assert item.price == 900.0
        assert item.in_stock is False
        assert item.priority == WishlistPriority.MEDIUM.value

    def test_duplicate_is_ignored(self, wishlist, product):
        variant = product.variant_for("CLS-M-WHT")
        wishlist.add_item(product, variant)

        assert wishlist.add_item(product, variant) is None
        assert len(wishlist.items) == 1

    def test_other_variant_of_same_product_is_a_new_item(self, wishlist, product):
        wishlist.add_item(product, product.variant_for("CLS-M-WHT"))
        item = wishlist.add_item(product, product.variant_for("CLS-L-BLU"))

        assert item is not None
        assert item.in_stock is False
        assert len(wishlist.items_for_product(product.id)) == 2


class TestUpdateAndRemove:
    def test_update_priority_and_notes(self, wishlist, product):
        item = wishlist.add_item(product, product.variant_for("CLS-M-WHT"))
        wishlist.update_item(item.id, priority="low", notes="maybe later")

        assert item.priority == "low"
        assert item.notes == "maybe later"

    def test_switching_variant_refreshes_snapshot(self, wishlist, product):
        item = wishlist.add_item(product, product.variant_for("CLS-M-WHT"))
        wishlist.update_item(item.id, product=product, variant=product.variant_for("CLS-L-BLU"))

        assert item.variant_sku == "CLS-L-BLU"
        assert item.price == 650.0
        assert item.in_stock is False

    def test_remove_and_clear(self, wishlist, product):
        first = wishlist.add_item(product, product.variant_for("CLS-M-WHT"))
        wishlist.add_item(product, product.variant_for("CLS-L-BLU"))

        wishlist.remove_item(first.id)
        assert wishlist.item_count == 1

        wishlist.clear()
        assert wishlist.items == []
        assert wishlist.item_count == 0

    def test_unknown_item(self, wishlist):
        with pytest.raises(NotFound):
            wishlist.remove_item("missing")


class TestStockSync:
    def test_restock_flips_in_stock(self, wishlist, product):
        item = wishlist.add_item(product, product.variant_for("CLS-L-BLU"))
        product.variant_for("CLS-L-BLU").stock = 4

        wishlist.update_stock(lambda i: product)

        assert item.in_stock is True
        assert wishlist.summary() == {"item_count": 1, "in_stock_count": 1}
        assert wishlist._events[-1].out_of_stock_count == 0
        assert isinstance(wishlist._events[-1], WishlistSynced)

    def test_vanished_variant_falls_back_to_product_price(self, wishlist, product):
        item = wishlist.add_item(product, product.variant_for("CLS-M-WHT"))
        replacement = make_product(base_price=700.0, variants=(("CLS-XL-RED", "XL", "Red", 720.0, 3),))

        wishlist.update_stock(lambda i: replacement)

        assert item.in_stock is False
        assert item.size is None
        assert item.color is None
        assert item.price == 700.0

    def test_vanished_product_marks_out_of_stock(self, wishlist, product):
        item = wishlist.add_item(product, product.variant_for("CLS-M-WHT"))

        wishlist.update_stock(lambda i: None)

        assert item.in_stock is False
        assert item.price == 500.0
