"""Domain events for the PaymentIntent aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="PaymentIntent")
class PaymentIntentCreated:
    __version__ = 1

    intent_id = Identifier(required=True)
    gateway_intent_id = String(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    expires_at = DateTime(required=True)


@storefront.event(part_of="PaymentIntent")
class PaymentIntentCompleted:
    """Payment verified; the order has been placed."""

    __version__ = 1

    intent_id = Identifier(required=True)
    order_id = Identifier(required=True)
    transaction_id = String(required=True)
    completed_at = DateTime(required=True)


@storefront.event(part_of="PaymentIntent")
class PaymentIntentFailed:
    __version__ = 1

    intent_id = Identifier(required=True)
    reason = String()
    failed_at = DateTime(required=True)
