"""Cart item management: commands and handler.

Item-level commands accept any identifier the cart can resolve: the line's
own id, its product id, its variant SKU or its product slug.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.lookup import get_product, get_variant
from storefront.domain import storefront
from storefront.errors import NotFound, ProductUnavailable
from storefront.cart.cart import Cart
from storefront.cart.catalogue_link import product_for_line

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class AddCartItem:
    customer_id = Identifier(required=True)
    product = String(required=True, max_length=200)
    variant_sku = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItemQuantity:
    customer_id = Identifier(required=True)
    item = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    customer_id = Identifier(required=True)
    item = String(required=True, max_length=200)


@storefront.command(part_of="Cart")
class SaveCartItemForLater:
    customer_id = Identifier(required=True)
    item = String(required=True, max_length=200)


@storefront.command(part_of="Cart")
class MoveCartItemToCart:
    customer_id = Identifier(required=True)
    item = String(required=True, max_length=200)


def existing_cart(repo, customer_id):
    cart = repo.for_customer(customer_id)
    if cart is None:
        raise NotFound("Cart not found", field="cart")
    return cart


def live_variant(cart, item):
    """The line's live product and variant, or ``(None, None)`` when the catalogue no longer lists it."""
    product = product_for_line(item)
    variant = product.variant_for(item.variant_sku) if product else None
    if variant is None:
        logger.warning(
            "Catalogue no longer lists cart item; applied without stock check",
            cart_id=str(cart.id),
            item_id=str(item.id),
        )
        return None, None
    return product, variant


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddCartItem)
    def add_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)

        product = get_product(command.product)
        if not product.is_available:
            raise ProductUnavailable(f"{product.title} is not available for purchase")
        variant = get_variant(product, command.variant_sku)

        item = cart.add_item(product, variant, command.quantity)
        repo.add(cart)

        logger.info(
            "Added item to cart",
            cart_id=str(cart.id),
            product_id=str(product.id),
            variant_sku=variant.sku,
            quantity=command.quantity,
        )
        return str(item.id)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(repo, command.customer_id)
        item = cart.item_for(command.item)
        product, variant = live_variant(cart, item)

        cart.update_item_quantity(str(item.id), command.quantity, product=product, variant=variant)
        repo.add(cart)
        return str(item.id)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(repo, command.customer_id)
        cart.remove_item(command.item)
        repo.add(cart)

    @handle(SaveCartItemForLater)
    def save_cart_item_for_later(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(repo, command.customer_id)
        item = cart.save_for_later(command.item)
        repo.add(cart)
        return str(item.id)

    @handle(MoveCartItemToCart)
    def move_cart_item_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(repo, command.customer_id)
        item = cart.item_for(command.item)
        product, variant = live_variant(cart, item)

        moved = cart.move_to_cart(str(item.id), product=product, variant=variant)
        repo.add(cart)
        return str(moved.id)
