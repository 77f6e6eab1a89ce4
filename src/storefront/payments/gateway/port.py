"""Payment gateway port.

Checkout talks to the payment provider through this interface only:
create an intent for the quoted amount, verify the customer's payment
against it, refund captured payments and interpret webhooks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class IntentResult:
    success: bool
    intent_id: str | None = None
    client_secret: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class VerificationResult:
    """What the gateway says was actually captured for an intent."""

    success: bool
    transaction_id: str | None = None
    amount: float | None = None
    currency: str | None = None
    method: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    success: bool
    gateway_refund_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class WebhookEvent:
    verified: bool
    event_type: str | None = None
    intent_id: str | None = None
    transaction_id: str | None = None
    amount: float | None = None
    failure_reason: str | None = None


class WebhookEventType:
    PAYMENT_CAPTURED = "payment.captured"
    PAYMENT_FAILED = "payment.failed"
    REFUND_PROCESSED = "refund.processed"


class PaymentGateway(ABC):
    @abstractmethod
    def create_intent(self, amount: float, currency: str, customer_id: str, idempotency_key: str) -> IntentResult:
        """Open a payment for ``amount`` that the customer completes client-side."""
        ...

    @abstractmethod
    def verify(self, intent_id: str, transaction_id: str, signature: str) -> VerificationResult:
        """Check the client's proof of payment and report the captured amount."""
        ...

    @abstractmethod
    def refund(self, transaction_id: str, amount: float, reason: str | None = None) -> RefundResult:
        ...

    @abstractmethod
    def handle_webhook(self, payload: str, signature: str) -> WebhookEvent:
        """Authenticate and decode a webhook delivery."""
        ...
