"""Wishlist aggregate: products a customer wants to remember, with in-stock tracking.

Unlike cart lines, wishlist items carry no quantity and no saved-for-later
state. A variant SKU is optional; an item without one tracks the product as
a whole.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from storefront.catalogue.pricing import resolve_price
from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.wishlist.events import (
    WishlistCleared,
    WishlistItemAdded,
    WishlistItemRemoved,
    WishlistItemUpdated,
    WishlistSynced,
)
from storefront.shared.identifiers import same_text


class WishlistPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@storefront.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    product_slug = String(max_length=200)
    variant_sku = String(max_length=50)
    title = String(required=True, max_length=255)
    price = Float(default=0.0)
    size = String(max_length=20)
    color = String(max_length=50)
    image_url = String(max_length=500)
    in_stock = Boolean(default=True)
    priority = String(choices=WishlistPriority, default=WishlistPriority.MEDIUM.value)
    notes = String(max_length=500)
    added_at = DateTime()

    def apply_variant(self, product, variant):
        """Take size, color, price and stock from ``variant``.

        A missing variant marks the item out of stock and falls back to
        product-level price with no size or color.
        """
        if variant is None:
            self.in_stock = False
            self.size = None
            self.color = None
            self.price = resolve_price(product)
            return

        self.in_stock = (variant.stock or 0) > 0
        self.size = variant.size
        self.color = variant.color or self.color
        self.price = resolve_price(product, variant)

    def sync_with(self, product):
        if product is None:
            self.in_stock = False
            return

        self.title = product.title
        self.product_slug = product.slug
        self.image_url = product.primary_image()

        if self.variant_sku:
            self.apply_variant(product, product.variant_for(self.variant_sku))
        else:
            self.in_stock = product.total_stock > 0
            self.price = resolve_price(product)


@storefront.aggregate
class Wishlist:
    customer_id = Identifier(required=True, unique=True)
    name = String(max_length=100, default="My Wishlist")
    is_public = Boolean(default=False)
    items = HasMany(WishlistItem)
    item_count = Integer(default=0)
    created_at = DateTime()
    last_activity_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, item_count=0, created_at=now, last_activity_at=now)

    def _touch(self):
        self.item_count = len(self.items)
        self.last_activity_at = datetime.now(UTC)

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def item_for(self, item_id):
        item = self.find_item(item_id)
        if item is None:
            raise NotFound("Item not found in wishlist", field="item_id")
        return item

    def items_for_product(self, product_id):
        return [i for i in self.items if str(i.product_id) == str(product_id)]

    def contains(self, product_id, variant_sku=None) -> bool:
        return any(
            variant_sku is None or same_text(i.variant_sku, variant_sku) for i in self.items_for_product(product_id)
        )

    def summary(self) -> dict:
        return {
            "item_count": len(self.items),
            "in_stock_count": sum(1 for i in self.items if i.in_stock),
        }

    def add_item(self, product, variant=None, priority=None, notes=None):
        """Add a product (optionally narrowed to a variant).

        Returns the new item, or None when the same product/variant is
        already on the list.
        """
        variant_sku = variant.sku if variant is not None else None
        if self.contains(product.id, variant_sku):
            return None

        item = WishlistItem(
            product_id=product.id,
            product_slug=product.slug,
            variant_sku=variant_sku,
            title=product.title,
            image_url=product.primary_image(variant),
            priority=priority or WishlistPriority.MEDIUM.value,
            notes=notes,
            added_at=datetime.now(UTC),
        )
        if variant is not None:
            item.apply_variant(product, variant)
        else:
            item.in_stock = product.total_stock > 0
            item.price = resolve_price(product)

        self.add_items(item)
        self._touch()
        self.raise_(
            WishlistItemAdded(
                wishlist_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product.id),
                variant_sku=variant_sku,
            )
        )
        return item

    def update_item(self, item_id, priority=None, notes=None, product=None, variant=None):
        item = self.item_for(item_id)
        if priority is not None:
            item.priority = priority
        if notes is not None:
            item.notes = notes
        if variant is not None:
            item.variant_sku = variant.sku
            item.apply_variant(product, variant)

        self._touch()
        self.raise_(WishlistItemUpdated(wishlist_id=str(self.id), item_id=str(item.id)))
        return item

    def remove_item(self, item_id):
        item = self.item_for(item_id)
        self.remove_items(item)
        self._touch()
        self.raise_(WishlistItemRemoved(wishlist_id=str(self.id), item_id=str(item.id)))

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self._touch()
        self.raise_(WishlistCleared(wishlist_id=str(self.id)))

    def update_stock(self, product_for):
        """Re-read every item from the catalogue. ``product_for(item)`` returns the live product or None."""
        for item in self.items:
            item.sync_with(product_for(item))
        self._touch()
        self.raise_(
            WishlistSynced(
                wishlist_id=str(self.id),
                out_of_stock_count=sum(1 for i in self.items if not i.in_stock),
            )
        )
