"""Online payment checkout: commands and handler.

1. ``CreatePaymentIntent`` prices the cart exactly like order placement,
   opens an intent with the gateway for the grand total and records it.
2. ``VerifyPayment`` checks the customer's proof of payment with the
   gateway, requires the captured amount to match the quote, and places the
   order already confirmed.
3. ``ProcessGatewayWebhook`` reacts to asynchronous gateway notifications.
"""

from uuid import uuid4

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.errors import NotFound, PaymentVerificationFailed, ValidationFailed
from storefront.order.order import Order, OrderStatus
from storefront.order.placement import place_order, prepare_checkout
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import WebhookEventType
from storefront.payments.intent import PaymentIntent, PaymentIntentStatus

logger = structlog.get_logger(__name__)

_AMOUNT_TOLERANCE = 0.005


@storefront.command(part_of="PaymentIntent")
class CreatePaymentIntent:
    customer_id = Identifier(required=True)
    shipping_address_id = Identifier(required=True)
    payment_method = String(default="card", max_length=50)
    coupon_code = String(max_length=50)
    customer_notes = Text()


@storefront.command(part_of="PaymentIntent")
class VerifyPayment:
    customer_id = Identifier(required=True)
    intent_id = String(required=True, max_length=255)
    transaction_id = String(required=True, max_length=255)
    signature = String(required=True, max_length=512)


@storefront.command(part_of="PaymentIntent")
class ProcessGatewayWebhook:
    body = Text(required=True)
    signature = String(max_length=512)


def _owned_intent(gateway_intent_id, customer_id):
    intent = current_domain.repository_for(PaymentIntent).find_by_gateway_id(gateway_intent_id)
    if intent is None or str(intent.customer_id) != str(customer_id):
        raise NotFound("Payment intent not found", field="intent_id")
    return intent


@storefront.command_handler(part_of=PaymentIntent)
class PaymentCheckoutHandler:
    @handle(CreatePaymentIntent)
    def create_payment_intent(self, command):
        settings = get_settings()
        quote = prepare_checkout(command.customer_id, command.shipping_address_id, command.coupon_code)

        result = get_gateway().create_intent(
            amount=quote.pricing.grand_total,
            currency=settings.currency,
            customer_id=str(command.customer_id),
            idempotency_key=str(uuid4()),
        )
        if not result.success:
            raise ValidationFailed(f"Could not start payment: {result.failure_reason}", field="payment")

        intent = PaymentIntent.open(
            gateway_intent_id=result.intent_id,
            customer_id=command.customer_id,
            shipping_address_id=command.shipping_address_id,
            payment_method=command.payment_method or "card",
            amount=quote.pricing.grand_total,
            currency=settings.currency,
            ttl_minutes=settings.payment_intent_ttl_minutes,
            coupon_code=quote.coupon_code,
            customer_notes=command.customer_notes,
        )
        current_domain.repository_for(PaymentIntent).add(intent)

        logger.info(
            "Payment intent created",
            intent_id=result.intent_id,
            customer_id=str(command.customer_id),
            amount=intent.amount,
        )
        return {
            "intent_id": result.intent_id,
            "client_secret": result.client_secret,
            "amount": intent.amount,
            "currency": intent.currency,
            "expires_at": intent.expires_at.isoformat(),
        }

    @handle(VerifyPayment)
    def verify_payment(self, command):
        intents = current_domain.repository_for(PaymentIntent)
        intent = _owned_intent(command.intent_id, command.customer_id)

        if intent.status == PaymentIntentStatus.COMPLETED.value:
            logger.info("Payment already verified", intent_id=command.intent_id, order_id=str(intent.order_id))
            return str(intent.order_id)
        if intent.status == PaymentIntentStatus.FAILED.value:
            raise PaymentVerificationFailed(f"Payment failed: {intent.failure_reason}", field="intent_id")
        if intent.is_expired():
            raise PaymentVerificationFailed("Payment session has expired", field="intent_id")

        result = get_gateway().verify(command.intent_id, command.transaction_id, command.signature)
        if not result.success:
            logger.warning("Payment verification failed", intent_id=command.intent_id, reason=result.failure_reason)
            raise PaymentVerificationFailed(result.failure_reason or "Payment verification failed", field="signature")

        quote = prepare_checkout(intent.customer_id, intent.shipping_address_id, intent.coupon_code)
        for expected in (intent.amount, quote.pricing.grand_total):
            if result.amount is None or abs(result.amount - expected) > _AMOUNT_TOLERANCE:
                logger.warning(
                    "Payment amount mismatch",
                    intent_id=command.intent_id,
                    captured=result.amount,
                    expected=expected,
                )
                raise PaymentVerificationFailed("Payment amount mismatch", field="amount")

        order = place_order(
            quote,
            intent.payment_method,
            customer_notes=intent.customer_notes,
            transaction_id=result.transaction_id,
            gateway_intent_id=intent.gateway_intent_id,
        )
        intent.complete(order.id, result.transaction_id)
        intents.add(intent)
        return str(order.id)

    @handle(ProcessGatewayWebhook)
    def process_gateway_webhook(self, command):
        event = get_gateway().handle_webhook(command.body, command.signature)
        if not event.verified:
            raise PaymentVerificationFailed("Invalid webhook signature", field="signature")

        intents = current_domain.repository_for(PaymentIntent)
        intent = intents.find_by_gateway_id(event.intent_id)
        if intent is None:
            logger.warning("Webhook for unknown payment intent", event_type=event.event_type, intent_id=event.intent_id)
            return {"event": event.event_type, "handled": False}

        if event.event_type == WebhookEventType.PAYMENT_FAILED:
            if intent.status == PaymentIntentStatus.CREATED.value:
                intent.fail(event.failure_reason or "Payment failed")
                intents.add(intent)
            return {"event": event.event_type, "handled": True}

        if event.event_type == WebhookEventType.REFUND_PROCESSED and intent.order_id:
            orders = current_domain.repository_for(Order)
            order = orders.get(intent.order_id)
            if order.status == OrderStatus.CANCELLED.value:
                order.refund()
                orders.add(order)
                return {"event": event.event_type, "handled": True}
            logger.warning("Refund webhook for order that is not cancelled", order_id=str(order.id), status=order.status)
            return {"event": event.event_type, "handled": False}

        if event.event_type == WebhookEventType.PAYMENT_CAPTURED:
            logger.info("Payment captured", intent_id=event.intent_id, intent_status=intent.status)
            return {"event": event.event_type, "handled": True}

        logger.info("Ignoring webhook event", event_type=event.event_type)
        return {"event": event.event_type, "handled": False}
