"""Stripe payment gateway adapter (production stub).

Placeholder for the stripe-python integration: PaymentIntents for
``create_intent``/``verify``, Refunds for ``refund`` and
``stripe.Webhook.construct_event`` for webhook authentication.
"""

from storefront.payments.gateway.port import (
    IntentResult,
    PaymentGateway,
    RefundResult,
    VerificationResult,
    WebhookEvent,
)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter. Not yet implemented."""

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def create_intent(self, amount: float, currency: str, customer_id: str, idempotency_key: str) -> IntentResult:
        raise NotImplementedError("StripeGateway.create_intent() is not yet implemented")

    def verify(self, intent_id: str, transaction_id: str, signature: str) -> VerificationResult:
        raise NotImplementedError("StripeGateway.verify() is not yet implemented")

    def refund(self, transaction_id: str, amount: float, reason: str | None = None) -> RefundResult:
        raise NotImplementedError("StripeGateway.refund() is not yet implemented")

    def handle_webhook(self, payload: str, signature: str) -> WebhookEvent:
        raise NotImplementedError("StripeGateway.handle_webhook() is not yet implemented")
