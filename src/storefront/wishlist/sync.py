"""Wishlist synchronisation with the live catalogue, plus read-side helpers."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.lookup import find_product
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.wishlist.wishlist import Wishlist


@storefront.command(part_of="Wishlist")
class SyncWishlist:
    customer_id = Identifier(required=True)


def _product_for_item(item):
    return current_domain.repository_for(Product).find(item.product_id)


@storefront.command_handler(part_of=Wishlist)
class SyncWishlistHandler:
    @handle(SyncWishlist)
    def sync_wishlist(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.get_or_create(command.customer_id)
        wishlist.update_stock(_product_for_item)
        repo.add(wishlist)
        return str(wishlist.id)


def wishlist_summary(customer_id) -> dict:
    wishlist = current_domain.repository_for(Wishlist).for_customer(customer_id)
    if wishlist is None:
        return {"item_count": 0, "in_stock_count": 0}
    return wishlist.summary()


def check_product(customer_id, identifier) -> dict:
    """Whether the product (by id, slug or SKU) is on the customer's wishlist."""
    product = find_product(identifier)
    wishlist = current_domain.repository_for(Wishlist).for_customer(customer_id)
    if product is None or wishlist is None:
        return {"in_wishlist": False, "item_ids": []}

    items = wishlist.items_for_product(product.id)
    return {"in_wishlist": bool(items), "item_ids": [str(i.id) for i in items]}
