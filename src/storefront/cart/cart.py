"""Cart aggregate: a customer's line items with snapshots kept in sync with the catalogue.

Each customer owns exactly one cart. Line items are either active (counted
in totals and eligible for checkout) or saved for later. Price, title, image,
size and color on each line are snapshots; the catalogue stays
authoritative and the cart refreshes its copies whenever it touches a line.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.catalogue.pricing import resolve_price
from storefront.domain import storefront
from storefront.errors import InsufficientStock, NotFound
from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemMovedToCart,
    CartItemRemoved,
    CartItemSavedForLater,
    CartQuantityUpdated,
)
from storefront.shared.identifiers import Lookup, Resolver, same_text


class IssueType:
    PRODUCT_NOT_FOUND = "product_not_found"
    VARIANT_NOT_FOUND = "variant_not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PRICE_CHANGED = "price_changed"


@storefront.value_object(part_of="Cart")
class CartTotals:
    subtotal = Float(default=0.0)
    item_count = Integer(default=0)
    saved_item_count = Integer(default=0)


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    product_slug = String(max_length=200)
    variant_sku = String(required=True, max_length=50)
    title = String(required=True, max_length=255)
    unit_price = Float(default=0.0)
    size = String(max_length=20)
    color = String(max_length=50)
    image_url = String(max_length=500)
    quantity = Integer(required=True, min_value=1)
    saved_for_later = Boolean(default=False)
    source_wishlist_item_id = Identifier()
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return (self.unit_price or 0.0) * self.quantity

    def matches(self, product_id, variant_sku) -> bool:
        return str(self.product_id) == str(product_id) and same_text(self.variant_sku, variant_sku)

    def refresh_snapshot(self, product, variant) -> bool:
        """Copy current catalogue values onto this line. Returns True when anything changed."""
        current = {
            "title": product.title,
            "product_slug": product.slug,
            "image_url": product.primary_image(variant),
            "unit_price": resolve_price(product, variant),
            "size": variant.size if variant is not None else self.size,
            "color": variant.color if variant is not None else self.color,
        }
        changed = False
        for field, value in current.items():
            if value is not None and getattr(self, field) != value:
                setattr(self, field, value)
                changed = True
        return changed


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    totals = ValueObject(CartTotals)
    created_at = DateTime()
    last_activity_at = DateTime()

    @invariant.post
    def active_lines_are_unique_per_variant(self):
        seen = set()
        for item in self.active_items:
            key = (str(item.product_id), (item.variant_sku or "").lower())
            if key in seen:
                raise ValidationError({"items": ["Duplicate product variant among active cart items"]})
            seen.add(key)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            totals=CartTotals(subtotal=0.0, item_count=0, saved_item_count=0),
            created_at=now,
            last_activity_at=now,
        )

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    @property
    def active_items(self):
        return [i for i in self.items if not i.saved_for_later]

    @property
    def saved_items(self):
        return [i for i in self.items if i.saved_for_later]

    def summary(self) -> dict:
        totals = self.totals or CartTotals()
        return {
            "item_count": totals.item_count,
            "subtotal": totals.subtotal,
            "saved_item_count": totals.saved_item_count,
        }

    def find_item(self, identifier):
        """Locate a line by item id, product id, variant SKU or product slug, in that order."""
        return Resolver(
            Lookup("item_id", lambda value: next((i for i in self.items if str(i.id) == value), None)),
            Lookup("product_id", lambda value: next((i for i in self.items if str(i.product_id) == value), None)),
            Lookup("variant_sku", lambda value: next((i for i in self.items if same_text(i.variant_sku, value)), None)),
            Lookup(
                "product_slug", lambda value: next((i for i in self.items if same_text(i.product_slug, value)), None)
            ),
        ).resolve(identifier)

    def item_for(self, identifier):
        item = self.find_item(identifier)
        if item is None:
            raise NotFound("Item not found in cart", field="item_id")
        return item

    def active_item_for(self, product_id, variant_sku):
        return next((i for i in self.active_items if i.matches(product_id, variant_sku)), None)

    def contains_wishlist_item(self, wishlist_item_id) -> bool:
        return any(str(i.source_wishlist_item_id) == str(wishlist_item_id) for i in self.items)

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def recalculate_totals(self):
        active = self.active_items
        self.totals = CartTotals(
            subtotal=round(sum(i.line_total for i in active), 2),
            item_count=sum(i.quantity for i in active),
            saved_item_count=len(self.saved_items),
        )

    def _touch(self):
        self.recalculate_totals()
        self.last_activity_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, variant, quantity, source_wishlist_item_id=None):
        """Add a variant to the cart, merging into an existing active line of the same variant."""
        existing = self.active_item_for(product.id, variant.sku)
        requested = quantity + (existing.quantity if existing else 0)
        if variant.stock < requested:
            raise InsufficientStock(
                f"Only {variant.stock} items available in stock",
                available=variant.stock,
                requested=requested,
            )

        if existing:
            existing.refresh_snapshot(product, variant)
            existing.quantity = requested
            if source_wishlist_item_id and not existing.source_wishlist_item_id:
                existing.source_wishlist_item_id = source_wishlist_item_id
            item = existing
        else:
            item = CartItem(
                product_id=product.id,
                product_slug=product.slug,
                variant_sku=variant.sku,
                title=product.title,
                unit_price=resolve_price(product, variant),
                size=variant.size,
                color=variant.color,
                image_url=product.primary_image(variant),
                quantity=quantity,
                source_wishlist_item_id=source_wishlist_item_id,
                added_at=datetime.now(UTC),
            )
            self.add_items(item)

        self._touch()
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product.id),
                variant_sku=variant.sku,
                quantity=quantity,
            )
        )
        return item

    def update_item_quantity(self, identifier, quantity, product=None, variant=None):
        """Set a line's quantity after refreshing its snapshot from the live variant.

        When the catalogue no longer knows the product or variant the quantity
        is applied as-is; checkout re-validates every line anyway.
        """
        item = self.item_for(identifier)
        if variant is not None:
            if variant.stock < quantity:
                raise InsufficientStock(
                    f"Only {variant.stock} items available in stock",
                    available=variant.stock,
                    requested=quantity,
                )
            item.refresh_snapshot(product, variant)

        previous_quantity = item.quantity
        item.quantity = quantity
        self._touch()

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return item

    def remove_item(self, identifier):
        item = self.item_for(identifier)
        self.remove_items(item)
        self._touch()
        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item.id)))

    def save_for_later(self, identifier):
        item = self.item_for(identifier)
        item.saved_for_later = True
        self._touch()
        self.raise_(CartItemSavedForLater(cart_id=str(self.id), item_id=str(item.id)))
        return item

    def move_to_cart(self, identifier, product=None, variant=None):
        """Bring a saved line back, merging into an active line of the same variant if one exists.

        With a live ``variant`` the resulting active quantity is checked
        against its stock and the snapshot refreshed before the move.
        """
        item = self.item_for(identifier)
        if not item.saved_for_later:
            return item

        existing = self.active_item_for(item.product_id, item.variant_sku)
        if variant is not None:
            requested = item.quantity + (existing.quantity if existing else 0)
            if variant.stock < requested:
                raise InsufficientStock(
                    f"Only {variant.stock} items available in stock",
                    available=variant.stock,
                    requested=requested,
                )

        with atomic_change(self):
            if variant is not None:
                item.refresh_snapshot(product, variant)
                if existing:
                    existing.refresh_snapshot(product, variant)
            if existing:
                existing.quantity += item.quantity
                self.remove_items(item)
                target = existing
            else:
                item.saved_for_later = False
                target = item
            self._touch()

        self.raise_(CartItemMovedToCart(cart_id=str(self.id), item_id=str(target.id)))
        return target

    def clear(self, include_saved=True):
        with atomic_change(self):
            for item in list(self.items):
                if include_saved or not item.saved_for_later:
                    self.remove_items(item)
            self._touch()
        self.raise_(CartCleared(cart_id=str(self.id), customer_id=str(self.customer_id)))

    # -------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------
    def refresh_from_catalogue(self, product_for) -> bool:
        """Refresh every line's snapshot. ``product_for(item)`` returns the live product or None."""
        changed = False
        for item in self.items:
            product = product_for(item)
            if product is None:
                continue
            changed = item.refresh_snapshot(product, product.variant_for(item.variant_sku)) or changed

        if changed:
            self._touch()
        return changed

    def validate(self, product_for):
        """Check every active line against the catalogue.

        Returns ``(issues, updated_item_ids)``. Lines whose price drifted get
        the new price written into their snapshot, so a second run without
        catalogue changes reports no price changes.
        """
        issues = []
        updated = []

        for item in self.active_items:
            item_id = str(item.id)
            product = product_for(item)
            if product is None:
                issues.append(
                    {
                        "item_id": item_id,
                        "type": IssueType.PRODUCT_NOT_FOUND,
                        "message": f'"{item.title}" is no longer available.',
                    }
                )
                continue

            variant = product.variant_for(item.variant_sku)
            if variant is None:
                issues.append(
                    {
                        "item_id": item_id,
                        "type": IssueType.VARIANT_NOT_FOUND,
                        "message": f'Selected variant for "{item.title}" is no longer available.',
                    }
                )
                continue

            if variant.stock < item.quantity:
                issues.append(
                    {
                        "item_id": item_id,
                        "type": IssueType.INSUFFICIENT_STOCK,
                        "message": f"Only {variant.stock} items available in stock",
                        "available_quantity": variant.stock,
                        "requested_quantity": item.quantity,
                    }
                )

            latest_price = resolve_price(product, variant)
            if latest_price != item.unit_price:
                issues.append(
                    {
                        "item_id": item_id,
                        "type": IssueType.PRICE_CHANGED,
                        "message": f'Price for "{item.title}" has changed',
                        "old_price": item.unit_price,
                        "new_price": latest_price,
                    }
                )
                item.refresh_snapshot(product, variant)
                updated.append(item_id)

        if updated:
            self._touch()
        return issues, updated
