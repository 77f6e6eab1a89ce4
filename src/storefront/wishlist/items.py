"""Wishlist item management: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.lookup import get_product, get_variant
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.wishlist.wishlist import Wishlist, WishlistPriority

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Wishlist")
class AddWishlistItem:
    customer_id = Identifier(required=True)
    product = String(required=True, max_length=200)
    variant_sku = String(max_length=50)
    priority = String(choices=WishlistPriority)
    notes = String(max_length=500)


@storefront.command(part_of="Wishlist")
class UpdateWishlistItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    priority = String(choices=WishlistPriority)
    notes = String(max_length=500)
    variant_sku = String(max_length=50)


@storefront.command(part_of="Wishlist")
class RemoveWishlistItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="Wishlist")
class ClearWishlist:
    customer_id = Identifier(required=True)


def existing_wishlist(repo, customer_id):
    wishlist = repo.for_customer(customer_id)
    if wishlist is None:
        raise NotFound("Wishlist not found", field="wishlist")
    return wishlist


@storefront.command_handler(part_of=Wishlist)
class ManageWishlistItemsHandler:
    @handle(AddWishlistItem)
    def add_wishlist_item(self, command):
        """Returns ``{"added": bool, "item_id": ...}``; a duplicate is not an error."""
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.get_or_create(command.customer_id)

        product = get_product(command.product)
        variant = get_variant(product, command.variant_sku) if command.variant_sku else None

        item = wishlist.add_item(product, variant, priority=command.priority, notes=command.notes)
        if item is None:
            logger.info("Wishlist already holds item", wishlist_id=str(wishlist.id), product_id=str(product.id))
            return {"added": False, "item_id": None}

        repo.add(wishlist)
        return {"added": True, "item_id": str(item.id)}

    @handle(UpdateWishlistItem)
    def update_wishlist_item(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = existing_wishlist(repo, command.customer_id)

        product = variant = None
        if command.variant_sku:
            item = wishlist.item_for(command.item_id)
            product = current_domain.repository_for(Product).get(item.product_id)
            variant = get_variant(product, command.variant_sku)

        wishlist.update_item(
            command.item_id,
            priority=command.priority,
            notes=command.notes,
            product=product,
            variant=variant,
        )
        repo.add(wishlist)

    @handle(RemoveWishlistItem)
    def remove_wishlist_item(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = existing_wishlist(repo, command.customer_id)
        wishlist.remove_item(command.item_id)
        repo.add(wishlist)

    @handle(ClearWishlist)
    def clear_wishlist(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.get_or_create(command.customer_id)
        wishlist.clear()
        repo.add(wishlist)
