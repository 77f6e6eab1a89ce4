"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was materialized from a customer's cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    grand_total = Float(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    transaction_id = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled; its stock goes back on the shelf."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderRefunded:
    __version__ = 1

    order_id = Identifier(required=True)
    amount = Float(required=True)
    refunded_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ReturnRequested:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    refund_amount = Float(required=True)
    item_count = Integer(required=True)
    requested_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ReturnStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
