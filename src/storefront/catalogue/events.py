"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class VariantStockAdjusted:
    """A variant's stock level moved because of an order, a cancellation or a return."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_sku: String(required=True)
    delta: Integer(required=True)
    stock: Integer(required=True)
    total_sold: Integer()


@storefront.event(part_of="Product")
class VariantPriceChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    variant_sku: String(required=True)
    previous_price: Float()
    new_price: Float()
