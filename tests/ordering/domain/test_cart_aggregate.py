import random

import pytest
from factories import make_product

from storefront.errors import InsufficientStock, NotFound
from storefront.cart.cart import Cart, IssueType
from storefront.cart.events import CartCleared, CartItemAdded, CartItemMovedToCart


@pytest.fixture
def product():
    return make_product(
        variants=(
            ("CLS-M-WHT", "M", "White", 500.0, 10),
            ("CLS-L-BLU", "L", "Blue", 650.0, 2),
        )
    )


@pytest.fixture
def cart():
    return Cart.create(customer_id="cust-1")


class TestAddItem:
    def test_add_creates_line_with_snapshot(self, cart, product):
        variant = product.variant_for("CLS-M-WHT")
        item = cart.add_item(product, variant, 2)

        assert item.title == "Classic Linen Shirt"
        assert item.unit_price == 500.0
        assert item.size == "M"
        assert item.color == "White"
        assert cart.summary() == {"item_count": 2, "subtotal": 1000.0, "saved_item_count": 0}
        assert isinstance(cart._events[-1], CartItemAdded)

    def test_same_variant_merges_into_one_line(self, cart, product):
        variant = product.variant_for("CLS-M-WHT")
        cart.add_item(product, variant, 2)
        cart.add_item(product, variant, 3)

        assert len(cart.active_items) == 1
        assert cart.active_items[0].quantity == 5
        assert cart.totals.subtotal == 2500.0

    def test_merged_quantity_cannot_exceed_stock(self, cart, product):
        variant = product.variant_for("CLS-L-BLU")
        cart.add_item(product, variant, 2)

        with pytest.raises(InsufficientStock) as exc:
            cart.add_item(product, variant, 1)

        assert exc.value.available == 2
        assert exc.value.requested == 3
        assert cart.active_items[0].quantity == 2

    def test_variant_override_wins_over_product_price(self, cart):
        product = make_product(base_price=800.0, variants=(("CLS-M-WHT", "M", "White", None, 5),))
        variant = product.variant_for("CLS-M-WHT")
        assert cart.add_item(product, variant, 1).unit_price == 800.0

        variant.price_override = 450.0
        cart.refresh_from_catalogue(lambda item: product)
        assert cart.active_items[0].unit_price == 450.0


class TestLookupAndQuantity:
    def test_item_found_by_sku_and_slug(self, cart, product):
        item = cart.add_item(product, product.variant_for("CLS-M-WHT"), 1)

        assert cart.item_for("cls-m-wht") is item
        assert cart.item_for("classic-linen-shirt") is item
        assert cart.item_for(str(item.id)) is item

    def test_unknown_item(self, cart):
        with pytest.raises(NotFound):
            cart.item_for("nothing")

    def test_update_quantity_checks_live_stock(self, cart, product):
        variant = product.variant_for("CLS-M-WHT")
        item = cart.add_item(product, variant, 1)

        with pytest.raises(InsufficientStock):
            cart.update_item_quantity(item.id, 11, product, variant)

        cart.update_item_quantity(item.id, 4, product, variant)
        assert cart.totals.item_count == 4

    def test_update_without_catalogue_data_applies_as_is(self, cart, product):
        item = cart.add_item(product, product.variant_for("CLS-M-WHT"), 1)
        cart.update_item_quantity(item.id, 30)
        assert item.quantity == 30

    def test_remove_item(self, cart, product):
        item = cart.add_item(product, product.variant_for("CLS-M-WHT"), 1)
        cart.remove_item(item.id)
        assert cart.items == []
        assert cart.totals.subtotal == 0.0


class TestSaveForLater:
    def test_saved_lines_leave_totals(self, cart, product):
        item = cart.add_item(product, product.variant_for("CLS-M-WHT"), 2)
        cart.add_item(product, product.variant_for("CLS-L-BLU"), 1)

        cart.save_for_later(item.id)

        assert cart.summary() == {"item_count": 1, "subtotal": 650.0, "saved_item_count": 1}

    def test_move_back_merges_with_active_line(self, cart, product):
        variant = product.variant_for("CLS-M-WHT")
        saved = cart.add_item(product, variant, 2)
        cart.save_for_later(saved.id)
        active = cart.add_item(product, variant, 1)

        target = cart.move_to_cart(saved.id)

        assert target.id == active.id
        assert len(cart.items) == 1
        assert target.quantity == 3
        assert isinstance(cart._events[-1], CartItemMovedToCart)

    def test_move_active_line_is_a_no_op(self, cart, product):
        item = cart.add_item(product, product.variant_for("CLS-M-WHT"), 1)
        cart._events.clear()

        assert cart.move_to_cart(item.id) is item
        assert cart._events == []


class TestClear:
    def test_clear_everything(self, cart, product):
        item = cart.add_item(product, product.variant_for("CLS-M-WHT"), 1)
        cart.add_item(product, product.variant_for("CLS-L-BLU"), 1)
        cart.save_for_later(item.id)

        cart.clear()

        assert cart.items == []
        assert isinstance(cart._events[-1], CartCleared)

    def test_clear_can_keep_saved_lines(self, cart, product):
        item = cart.add_item(product, product.variant_for("CLS-M-WHT"), 1)
        cart.add_item(product, product.variant_for("CLS-L-BLU"), 1)
        cart.save_for_later(item.id)

        cart.clear(include_saved=False)

        assert [i.id for i in cart.items] == [item.id]
        assert cart.summary()["saved_item_count"] == 1


class TestValidate:
    def test_price_drift_is_reported_once(self, cart, product):
        variant = product.variant_for("CLS-M-WHT")
        item = cart.add_item(product, variant, 1)
        variant.price = 550.0

        issues, updated = cart.validate(lambda line: product)
        assert [i["type"] for i in issues] == [IssueType.PRICE_CHANGED]
        assert issues[0]["old_price"] == 500.0
        assert issues[0]["new_price"] == 550.0
        assert updated == [str(item.id)]
        assert cart.totals.subtotal == 550.0

        issues, updated = cart.validate(lambda line: product)
        assert issues == []
        assert updated == []

    def test_missing_product_and_variant(self, cart, product):
        cart.add_item(product, product.variant_for("CLS-M-WHT"), 1)
        other = make_product(title="Other", slug="other", variants=(("OTH-1", "S", "Red", 100.0, 1),))

        issues, _ = cart.validate(lambda line: None)
        assert issues[0]["type"] == IssueType.PRODUCT_NOT_FOUND

        issues, _ = cart.validate(lambda line: other)
        assert issues[0]["type"] == IssueType.VARIANT_NOT_FOUND

    def test_short_stock_is_reported(self, cart, product):
        variant = product.variant_for("CLS-M-WHT")
        cart.add_item(product, variant, 4)
        variant.stock = 3

        issues, _ = cart.validate(lambda line: product)

        assert issues[0]["type"] == IssueType.INSUFFICIENT_STOCK
        assert issues[0]["available_quantity"] == 3
        assert issues[0]["requested_quantity"] == 4


@pytest.mark.parametrize("seed", [3, 17, 2024])
def test_totals_track_active_lines_through_random_operations(seed):
    rng = random.Random(seed)
    product = make_product(
        variants=tuple((f"SKU-{n}", "M", "Black", rng.choice([99.0, 249.5, 799.99]), 1000) for n in range(5))
    )
    cart = Cart.create(customer_id="cust-random")

    for _ in range(40):
        action = rng.choice(["add", "update", "save", "move", "remove"])
        if action == "add" or not cart.items:
            variant = rng.choice(product.variants)
            cart.add_item(product, variant, rng.randint(1, 5))
            continue

        item = rng.choice(cart.items)
        if action == "update":
            cart.update_item_quantity(item.id, rng.randint(1, 9))
        elif action == "save":
            cart.save_for_later(item.id)
        elif action == "move":
            cart.move_to_cart(item.id)
        else:
            cart.remove_item(item.id)

    active = [i for i in cart.items if not i.saved_for_later]
    assert cart.totals.item_count == sum(i.quantity for i in active)
    assert cart.totals.subtotal == round(sum(i.unit_price * i.quantity for i in active), 2)
    assert cart.totals.saved_item_count == len(cart.items) - len(active)
    keys = [(str(i.product_id), i.variant_sku.lower()) for i in active]
    assert len(keys) == len(set(keys))
