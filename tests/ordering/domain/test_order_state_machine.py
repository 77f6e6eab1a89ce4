import itertools

import pytest
from protean.exceptions import ValidationError
from factories import make_order

from storefront.errors import InvalidTransition, ValidationFailed
from storefront.order import timeline as progress
from storefront.order.events import (
    OrderCancelled,
    OrderPaymentConfirmed,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
)
from storefront.order.order import Order, OrderPricing, OrderStatus, PaymentStatus

ALLOWED = {
    ("pending", "confirmed"),
    ("pending", "cancelled"),
    ("confirmed", "processing"),
    ("confirmed", "cancelled"),
    ("processing", "packed"),
    ("processing", "cancelled"),
    ("packed", "shipped"),
    ("shipped", "out-for-delivery"),
    ("out-for-delivery", "delivered"),
    ("cancelled", "refunded"),
}

STATUSES = [s.value for s in OrderStatus]


class TestPlacement:
    def test_new_order_is_pending_with_locked_lines(self):
        order = Order.create(
            order_number="ORD-20260301-XYZ789",
            customer_id="cust-1",
            items=[{"product_id": "p-1", "variant_sku": "SKU-1", "title": "Tee", "quantity": 3, "unit_price": 199.99}],
            pricing=OrderPricing(subtotal=599.97, shipping=150.0, tax=36.0, discount=0.0, grand_total=785.97),
            payment_method="upi",
            shipping_address={"recipient": "Asha", "address_line1": "1 Road", "city": "Pune", "postal_code": "411001"},
        )

        assert order.status == "pending"
        assert order.payment.status == PaymentStatus.PENDING.value
        assert order.items[0].subtotal == 599.97
        assert order.delivery.estimated_date is not None
        assert " - " in order.delivery.window
        assert isinstance(order._events[-1], OrderPlaced)
        assert order._events[-1].item_count == 3

    def test_initial_timeline(self):
        events = progress.load(make_order().timeline)

        assert [e["title"] for e in events] == ["Order received", "Payment processing", "Preparing items"]
        assert [e["status"] for e in events] == ["complete", "current", "upcoming"]

    def test_pricing_must_add_up(self):
        with pytest.raises(ValidationError):
            OrderPricing(subtotal=1000.0, shipping=150.0, tax=60.0, discount=0.0, grand_total=1000.0)


@pytest.mark.parametrize("source,target", list(itertools.product(STATUSES, STATUSES)))
def test_transition_table_is_closed(source, target):
    order = make_order()
    order.status = source

    if (source, target) in ALLOWED:
        order.update_status(target)
        assert order.status == target
    else:
        with pytest.raises(InvalidTransition):
            order.update_status(target)
        assert order.status == source


class TestUpdateStatus:
    def test_unknown_status(self):
        with pytest.raises(ValidationFailed):
            make_order().update_status("teleported")

    def test_transition_appends_timeline_and_raises_event(self):
        order = make_order()
        order.update_status("confirmed")

        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert (event.previous_status, event.new_status) == ("pending", "confirmed")

        current = progress.current(order.timeline)
        assert current["title"] == "Order confirmed"
        assert sum(1 for e in progress.load(order.timeline) if e["status"] == "current") == 1

    def test_shipping_details_are_recorded(self):
        order = make_order()
        for status in ("confirmed", "processing", "packed"):
            order.update_status(status)

        order.update_status("shipped", tracking_number="TRK123", courier="BlueDart", note="Left the warehouse")

        assert order.delivery.tracking_number == "TRK123"
        assert order.delivery.courier == "BlueDart"
        assert progress.current(order.timeline)["description"] == "Left the warehouse"

    def test_delivery_is_terminal_and_stamped(self):
        order = make_order()
        for status in ("confirmed", "processing", "packed", "shipped", "out-for-delivery", "delivered"):
            order.update_status(status)

        assert order.delivery.delivered_at is not None
        assert progress.current(order.timeline) is None
        assert progress.load(order.timeline)[-1]["title"] == "Delivered"

    def test_only_cancel_returns_stock_lines(self):
        order = make_order(lines=[("A-1", "Tee", 2, 100.0), ("B-2", "Cap", 1, 50.0)])
        assert order.update_status("confirmed") == []

        lines = order.update_status("cancelled", note="Changed my mind")
        assert lines == [("prod-a-1", "A-1", 2), ("prod-b-2", "B-2", 1)]


class TestPayment:
    def test_confirm_payment(self):
        order = make_order()
        order.confirm_payment("txn_1", gateway_intent_id="pi_1")

        assert order.status == "confirmed"
        assert order.payment.status == PaymentStatus.COMPLETED.value
        assert order.payment.transaction_id == "txn_1"
        assert order.payment.gateway_intent_id == "pi_1"
        assert order.payment.method == "card"
        assert isinstance(order._events[-1], OrderPaymentConfirmed)

    def test_payment_cannot_be_confirmed_twice(self):
        order = make_order()
        order.confirm_payment("txn_1")
        with pytest.raises(InvalidTransition):
            order.confirm_payment("txn_2")


class TestCancelAndRefund:
    def test_cancel_records_reason(self):
        order = make_order()
        order.cancel(reason="Found it cheaper")

        assert order.status == "cancelled"
        assert order.cancelled_at is not None
        assert order.customer_notes == "Cancellation reason: Found it cheaper"
        assert isinstance(order._events[-1], OrderCancelled)

    def test_cannot_cancel_after_packing(self):
        order = make_order()
        for status in ("confirmed", "processing", "packed"):
            order.update_status(status)

        with pytest.raises(InvalidTransition):
            order.cancel()

    def test_refund_after_cancel(self):
        order = make_order()
        order.cancel()
        order.refund()

        assert order.status == "refunded"
        assert order.payment.status == PaymentStatus.REFUNDED.value
        assert order.payment.refunded_at is not None
        assert isinstance(order._events[-1], OrderRefunded)
        assert order._events[-1].amount == order.pricing.grand_total

    def test_refund_requires_cancellation(self):
        with pytest.raises(InvalidTransition):
            make_order().refund()
