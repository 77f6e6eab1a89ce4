"""Integration tests for online payment endpoints."""

import json

import pytest

from storefront.payments.gateway.fake_adapter import TEST_SIGNATURE


@pytest.fixture()
def intent(client, headers, customer, shirt):
    client.post(
        "/cart/items",
        json={"product_id": "classic-linen-shirt", "variant_sku": "CLS-M-WHT", "quantity": 2},
        headers=headers,
    )
    response = client.post(
        "/payments/intents", json={"shipping_address_id": str(customer.addresses[0].id)}, headers=headers
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestPaymentEndpoints:
    def test_intent(self, intent):
        assert intent["amount"] == 1210.0
        assert intent["currency"] == "INR"
        assert intent["intent_id"].startswith("fake_pi_")

    def test_verify_places_order(self, client, headers, intent):
        response = client.post(
            "/payments/verify",
            json={"intent_id": intent["intent_id"], "transaction_id": "txn_55", "signature": TEST_SIGNATURE},
            headers=headers,
        )

        assert response.status_code == 200
        order = response.json()["data"]
        assert order["status"] == "confirmed"
        assert order["payment"]["status"] == "completed"
        assert order["payment"]["transaction_id"] == "txn_55"

    def test_verify_with_bad_signature(self, client, headers, intent):
        response = client.post(
            "/payments/verify",
            json={"intent_id": intent["intent_id"], "transaction_id": "txn_55", "signature": "forged"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "payment_verification_failed"

    def test_webhook(self, client, intent):
        payload = json.dumps({"event": "payment.failed", "data": {"intent_id": intent["intent_id"]}})

        response = client.post(
            "/payments/webhook",
            content=payload,
            headers={"X-Gateway-Signature": TEST_SIGNATURE, "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"event": "payment.failed", "handled": True}

    def test_webhook_without_signature(self, client, intent):
        response = client.post("/payments/webhook", content="{}", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"] == "payment_verification_failed"
