"""PaymentIntent aggregate: the durable record between "start payment" and "verify payment".

When a customer starts an online payment, the quoted checkout (address,
coupon, amount) is stored against the gateway's intent id. Verification
later finds the intent, checks the captured amount against it and places
the order. Intents expire after ``PAYMENT_INTENT_TTL_MINUTES``.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront
from storefront.errors import InvalidTransition
from storefront.payments.events import PaymentIntentCompleted, PaymentIntentCreated, PaymentIntentFailed


class PaymentIntentStatus(Enum):
    CREATED = "created"
    COMPLETED = "completed"
    FAILED = "failed"


@storefront.aggregate
class PaymentIntent:
    gateway_intent_id = String(required=True, max_length=255, unique=True)
    customer_id = Identifier(required=True)
    shipping_address_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)
    coupon_code = String(max_length=50)
    customer_notes = Text()
    amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")
    status = String(choices=PaymentIntentStatus, default=PaymentIntentStatus.CREATED.value)
    order_id = Identifier()
    transaction_id = String(max_length=255)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    expires_at = DateTime()

    @classmethod
    def open(
        cls,
        gateway_intent_id,
        customer_id,
        shipping_address_id,
        payment_method,
        amount,
        currency,
        ttl_minutes,
        coupon_code=None,
        customer_notes=None,
    ):
        now = datetime.now(UTC)
        intent = cls(
            gateway_intent_id=gateway_intent_id,
            customer_id=str(customer_id),
            shipping_address_id=str(shipping_address_id),
            payment_method=payment_method,
            coupon_code=coupon_code,
            customer_notes=customer_notes,
            amount=amount,
            currency=currency,
            created_at=now,
            expires_at=now + timedelta(minutes=ttl_minutes),
        )
        intent.raise_(
            PaymentIntentCreated(
                intent_id=intent.id,
                gateway_intent_id=gateway_intent_id,
                customer_id=str(customer_id),
                amount=amount,
                expires_at=intent.expires_at,
            )
        )
        return intent

    def is_expired(self, now=None) -> bool:
        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return now >= expires_at

    def complete(self, order_id, transaction_id):
        if self.status != PaymentIntentStatus.CREATED.value:
            raise InvalidTransition(f"Payment intent is already {self.status}", field="status")
        self.status = PaymentIntentStatus.COMPLETED.value
        self.order_id = str(order_id)
        self.transaction_id = transaction_id
        self.raise_(
            PaymentIntentCompleted(
                intent_id=self.id,
                order_id=str(order_id),
                transaction_id=transaction_id,
                completed_at=datetime.now(UTC),
            )
        )

    def fail(self, reason):
        if self.status != PaymentIntentStatus.CREATED.value:
            raise InvalidTransition(f"Payment intent is already {self.status}", field="status")
        self.status = PaymentIntentStatus.FAILED.value
        self.failure_reason = reason
        self.raise_(PaymentIntentFailed(intent_id=self.id, reason=reason, failed_at=datetime.now(UTC)))


@storefront.repository(part_of=PaymentIntent)
class PaymentIntentRepository:
    def find_by_gateway_id(self, gateway_intent_id):
        if not gateway_intent_id:
            return None
        intents = self._dao.query.filter(gateway_intent_id=str(gateway_intent_id)).all().items
        return intents[0] if intents else None
