"""Domain events for the Wishlist aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Wishlist")
class WishlistItemAdded:
    __version__ = 1

    wishlist_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_sku = String()


@storefront.event(part_of="Wishlist")
class WishlistItemUpdated:
    """Priority, notes or the selected variant of a wishlist item changed."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.event(part_of="Wishlist")
class WishlistItemRemoved:
    __version__ = 1

    wishlist_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.event(part_of="Wishlist")
class WishlistCleared:
    __version__ = 1

    wishlist_id = Identifier(required=True)


@storefront.event(part_of="Wishlist")
class WishlistSynced:
    """Every item was re-read from the catalogue."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    out_of_stock_count = Integer(default=0)
