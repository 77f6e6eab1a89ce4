"""Product aggregate root with Variant entity.

The catalogue owns price, stock and identity for everything a customer can
buy. Carts, wishlists and orders only keep snapshots of these values and
look products up again whenever they need the authoritative figures.
"""

from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String, Text

from storefront.domain import storefront
from storefront.errors import InsufficientStock, VariantNotFound
from storefront.shared.identifiers import same_text


class ProductStatus(Enum):
    DRAFT = "Draft"
    ACTIVE = "Active"
    ARCHIVED = "Archived"


@storefront.entity(part_of="Product")
class Variant:
    """A purchasable size/color combination with its own SKU, price and stock."""

    sku: String(required=True, max_length=50)
    size: String(max_length=20)
    color: String(max_length=50)
    price: Float(min_value=0.0)
    price_override: Float(min_value=0.0)
    sale_price: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)
    image_url: String(max_length=500)


@storefront.aggregate
class Product:
    title: String(required=True, max_length=255)
    slug: String(required=True, max_length=200, unique=True)
    description: Text()
    base_price: Float(min_value=0.0)
    sale_price: Float(min_value=0.0)
    price: Float(min_value=0.0)
    image_url: String(max_length=500)
    status: String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    total_sold: Integer(default=0, min_value=0)
    variants: HasMany(Variant)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def variant_skus_must_be_unique(self):
        skus = [v.sku.lower() for v in self.variants]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique within a product"]})

    @classmethod
    def create(
        cls,
        title,
        slug,
        base_price=None,
        sale_price=None,
        price=None,
        description=None,
        image_url=None,
        status=ProductStatus.ACTIVE.value,
    ):
        now = datetime.now()
        return cls(
            title=title,
            slug=slug.strip().lower(),
            base_price=base_price,
            sale_price=sale_price,
            price=price,
            description=description,
            image_url=image_url,
            status=status,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_available(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    def add_variant(
        self,
        sku,
        size=None,
        color=None,
        price=None,
        stock=0,
        price_override=None,
        sale_price=None,
        image_url=None,
    ):
        variant = Variant(
            sku=sku,
            size=size,
            color=color,
            price=price,
            price_override=price_override,
            sale_price=sale_price,
            stock=stock,
            image_url=image_url,
        )
        self.add_variants(variant)
        self.updated_at = datetime.now()
        return variant

    def variant_for(self, sku):
        """Return the variant with this SKU (case-insensitive), or None."""
        return next((v for v in self.variants if same_text(v.sku, sku)), None)

    @property
    def total_stock(self) -> int:
        return sum(v.stock or 0 for v in self.variants)

    def primary_image(self, variant=None):
        if variant is not None and variant.image_url:
            return variant.image_url
        return self.image_url

    def change_variant_price(self, sku, price=None, sale_price=None, price_override=None):
        from storefront.catalogue.events import VariantPriceChanged

        variant = self.variant_for(sku)
        if variant is None:
            raise VariantNotFound(f"Variant {sku} not found on product {self.slug}")

        previous_price = variant.price
        if price is not None:
            variant.price = price
        if sale_price is not None:
            variant.sale_price = sale_price
        if price_override is not None:
            variant.price_override = price_override
        self.updated_at = datetime.now()

        self.raise_(
            VariantPriceChanged(
                product_id=self.id,
                variant_sku=variant.sku,
                previous_price=previous_price,
                new_price=variant.price,
            )
        )

    def adjust_stock(self, sku, delta, track_sales=True):
        """Move a variant's stock by ``delta``, refusing to go below zero.

        Decrements count as sales and increments reverse them when
        ``track_sales`` is set.
        """
        from storefront.catalogue.events import VariantStockAdjusted

        variant = self.variant_for(sku)
        if variant is None:
            raise VariantNotFound(f"Variant {sku} not found on product {self.slug}")

        new_stock = variant.stock + delta
        if new_stock < 0:
            raise InsufficientStock(
                f"Only {variant.stock} units of {self.title} ({variant.sku}) are available",
                available=variant.stock,
                requested=-delta,
            )

        variant.stock = new_stock
        if track_sales:
            self.total_sold = max(0, (self.total_sold or 0) - delta)
        self.updated_at = datetime.now()

        self.raise_(
            VariantStockAdjusted(
                product_id=self.id,
                variant_sku=variant.sku,
                delta=delta,
                stock=new_stock,
                total_sold=self.total_sold,
            )
        )
        return variant
