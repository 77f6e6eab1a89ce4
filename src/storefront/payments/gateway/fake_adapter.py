"""Configurable fake payment gateway for development and testing.

No external calls are made. Intents remember the amount they were opened
for, and ``capture`` lets a test pretend the customer paid something else.
A valid signature is the literal ``"test-signature"``.
"""

import json
from uuid import uuid4

from storefront.payments.gateway.port import (
    IntentResult,
    PaymentGateway,
    RefundResult,
    VerificationResult,
    WebhookEvent,
)

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.intents: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def capture(self, intent_id: str, amount: float) -> None:
        """Record the amount the customer actually paid against an intent."""
        self.intents[intent_id]["captured"] = amount

    def create_intent(self, amount: float, currency: str, customer_id: str, idempotency_key: str) -> IntentResult:
        self.calls.append(
            {
                "method": "create_intent",
                "amount": amount,
                "currency": currency,
                "customer_id": customer_id,
                "idempotency_key": idempotency_key,
            }
        )
        if not self.should_succeed:
            return IntentResult(success=False, gateway_status="failed", failure_reason=self.failure_reason)

        intent_id = f"fake_pi_{uuid4().hex[:12]}"
        self.intents[intent_id] = {"amount": amount, "currency": currency, "captured": amount}
        return IntentResult(
            success=True,
            intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            gateway_status="created",
        )

    def verify(self, intent_id: str, transaction_id: str, signature: str) -> VerificationResult:
        self.calls.append(
            {"method": "verify", "intent_id": intent_id, "transaction_id": transaction_id, "signature": signature}
        )
        if signature != TEST_SIGNATURE:
            return VerificationResult(success=False, failure_reason="Invalid payment signature")
        if not self.should_succeed:
            return VerificationResult(success=False, failure_reason=self.failure_reason)

        intent = self.intents.get(intent_id)
        if intent is None:
            return VerificationResult(success=False, failure_reason="Unknown payment intent")
        return VerificationResult(
            success=True,
            transaction_id=transaction_id,
            amount=intent["captured"],
            currency=intent["currency"],
            method="card",
        )

    def refund(self, transaction_id: str, amount: float, reason: str | None = None) -> RefundResult:
        self.calls.append({"method": "refund", "transaction_id": transaction_id, "amount": amount, "reason": reason})
        if self.should_succeed:
            return RefundResult(success=True, gateway_refund_id=f"fake_ref_{uuid4().hex[:12]}", gateway_status="succeeded")
        return RefundResult(success=False, failure_reason=self.failure_reason)

    def handle_webhook(self, payload: str, signature: str) -> WebhookEvent:
        if signature != TEST_SIGNATURE:
            return WebhookEvent(verified=False)

        body = json.loads(payload)
        data = body.get("data", {})
        return WebhookEvent(
            verified=True,
            event_type=body.get("event"),
            intent_id=data.get("intent_id"),
            transaction_id=data.get("transaction_id"),
            amount=data.get("amount"),
            failure_reason=data.get("failure_reason"),
        )
