"""Moving a wishlist item into the cart.

Both aggregates change inside the handler's unit of work, so the cart
insert and the wishlist removal commit together. The cart line also
remembers which wishlist item it came from; replaying the command after a
partial failure removes the wishlist item without adding a second line.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.catalogue.lookup import get_variant
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import InsufficientStock, NotFound, VariantRequired
from storefront.cart.cart import Cart
from storefront.wishlist.items import existing_wishlist
from storefront.wishlist.wishlist import Wishlist

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Wishlist")
class MoveWishlistItemToCart:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)


@storefront.command_handler(part_of=Wishlist)
class WishlistTransferHandler:
    @handle(MoveWishlistItemToCart)
    def move_to_cart(self, command):
        wishlists = current_domain.repository_for(Wishlist)
        carts = current_domain.repository_for(Cart)

        wishlist = existing_wishlist(wishlists, command.customer_id)
        item = wishlist.item_for(command.item_id)
        if not item.variant_sku:
            raise VariantRequired("Please select a size and color before adding to cart")

        cart = carts.get_or_create(command.customer_id)
        quantity = command.quantity or 1

        if cart.contains_wishlist_item(item.id):
            logger.info("Wishlist item already in cart", wishlist_item_id=str(item.id), cart_id=str(cart.id))
        else:
            product = current_domain.repository_for(Product).find(item.product_id)
            if product is None:
                raise NotFound("Product not found", field="product_id")
            variant = get_variant(product, item.variant_sku)
            if variant.stock < quantity:
                raise InsufficientStock(
                    f"Only {variant.stock} items available in stock",
                    available=variant.stock,
                    requested=quantity,
                )
            cart.add_item(product, variant, quantity, source_wishlist_item_id=item.id)
            carts.add(cart)

        wishlist.remove_item(item.id)
        wishlists.add(wishlist)

        return {"cart_id": str(cart.id), "wishlist_id": str(wishlist.id)}
