"""Order aggregate: the order lifecycle state machine with an embedded return workflow.

State machine:
    pending -> confirmed -> processing -> packed -> shipped ->
    out-for-delivery -> delivered
    pending | confirmed | processing -> cancelled -> refunded

Delivered orders may carry one return request at a time, which runs its own
status machine:
    requested -> approved | rejected | cancelled
    approved -> in-transit | cancelled
    in-transit -> received | cancelled
    received -> completed | cancelled

Items are frozen copies of cart lines; their unit price and subtotal are
locked when the order is placed and never recomputed.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject
from protean.utils.reflection import declared_fields

from storefront.domain import storefront
from storefront.errors import (
    DuplicateReturnItem,
    InvalidTransition,
    NotFound,
    ReturnAlreadyActive,
    ValidationFailed,
)
from storefront.order import timeline as progress
from storefront.order.delivery import delivery_window, estimated_delivery
from storefront.order.events import (
    OrderCancelled,
    OrderPaymentConfirmed,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    ReturnRequested,
    ReturnStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    PACKED = "packed"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class ReturnStatus(Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_TRANSIT = "in-transit"
    RECEIVED = "received"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.PACKED, OrderStatus.CANCELLED},
    OrderStatus.PACKED: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.OUT_FOR_DELIVERY},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),  # Terminal
}

_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.REFUNDED}

_STATUS_TIMELINE = {
    OrderStatus.CONFIRMED: ("Order confirmed", "Your payment was received and the order is confirmed."),
    OrderStatus.PROCESSING: ("Processing", "We're preparing your items."),
    OrderStatus.PACKED: ("Packed", "Your items are packed and ready to ship."),
    OrderStatus.SHIPPED: ("Shipped", "Your order is on its way."),
    OrderStatus.OUT_FOR_DELIVERY: ("Out for delivery", "Your order will arrive today."),
    OrderStatus.DELIVERED: ("Delivered", "Your order has been delivered."),
    OrderStatus.CANCELLED: ("Order cancelled", "Your order has been cancelled."),
    OrderStatus.REFUNDED: ("Refunded", "Your payment has been refunded."),
}

_RETURN_TRANSITIONS = {
    ReturnStatus.REQUESTED: {ReturnStatus.APPROVED, ReturnStatus.REJECTED, ReturnStatus.CANCELLED},
    ReturnStatus.APPROVED: {ReturnStatus.IN_TRANSIT, ReturnStatus.CANCELLED},
    ReturnStatus.IN_TRANSIT: {ReturnStatus.RECEIVED, ReturnStatus.CANCELLED},
    ReturnStatus.RECEIVED: {ReturnStatus.COMPLETED, ReturnStatus.CANCELLED},
    ReturnStatus.COMPLETED: set(),
    ReturnStatus.REJECTED: set(),
    ReturnStatus.CANCELLED: set(),
}

_RETURN_FINAL_STATES = {ReturnStatus.COMPLETED, ReturnStatus.REJECTED, ReturnStatus.CANCELLED}

_RETURN_TIMELINE = {
    ReturnStatus.REQUESTED: ("Return requested", "We've received your return request."),
    ReturnStatus.APPROVED: ("Return approved", "Your return was approved. Please ship the items back."),
    ReturnStatus.REJECTED: ("Return rejected", "Your return request was not approved."),
    ReturnStatus.IN_TRANSIT: ("Return in transit", "The returned items are on their way to us."),
    ReturnStatus.RECEIVED: ("Return received", "We've received the returned items."),
    ReturnStatus.COMPLETED: ("Return completed", "Your return is complete."),
    ReturnStatus.CANCELLED: ("Return cancelled", "The return request was cancelled."),
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderPricing:
    """Money summary locked at checkout: grand total = subtotal + shipping + tax - discount."""

    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    discount = Float(default=0.0)
    grand_total = Float(default=0.0)
    currency = String(max_length=3, default="INR")

    @invariant.post
    def grand_total_adds_up(self):
        expected = (self.subtotal or 0) + (self.shipping or 0) + (self.tax or 0) - (self.discount or 0)
        if abs(expected - (self.grand_total or 0)) > 0.005:
            raise ValidationError({"grand_total": ["Grand total must equal subtotal + shipping + tax - discount"]})


@storefront.value_object(part_of="Order")
class PaymentDetails:
    method = String(required=True, max_length=50)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=255)
    gateway_intent_id = String(max_length=255)
    paid_at = DateTime()
    refunded_at = DateTime()
    refund_id = String(max_length=255)


@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, copied from the address book at checkout and never updated afterwards."""

    address_id = Identifier()
    recipient = String(required=True, max_length=100)
    phone = String(max_length=20)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100)
    instructions = String(max_length=500)


@storefront.value_object(part_of="Order")
class CustomerContact:
    name = String(max_length=200)
    email = String(max_length=254)
    phone = String(max_length=20)


@storefront.value_object(part_of="Order")
class DeliveryDetails:
    estimated_date = Date()
    window = String(max_length=100)
    tracking_number = String(max_length=100)
    courier = String(max_length=100)
    delivered_at = DateTime()


@storefront.value_object(part_of="Order")
class ReturnRequest:
    """The order's return request. Replaced wholesale on every change.

    ``items``, ``evidence`` and ``timeline`` hold JSON arrays.
    """

    status = String(choices=ReturnStatus, default=ReturnStatus.REQUESTED.value)
    reason = String(required=True, max_length=500)
    customer_notes = Text()
    admin_notes = Text()
    resolution = String(max_length=100)
    refund_amount = Float(default=0.0, min_value=0.0)
    items = Text()
    evidence = Text()
    timeline = Text()
    requested_at = DateTime()
    updated_at = DateTime()
    resolved_at = DateTime()
    processed_by = String(max_length=100)

    @property
    def is_active(self) -> bool:
        return ReturnStatus(self.status) not in _RETURN_FINAL_STATES

    @property
    def returned_items(self) -> list[dict]:
        return json.loads(self.items) if self.items else []


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_slug = String(max_length=200)
    variant_sku = String(required=True, max_length=50)
    title = String(required=True, max_length=255)
    size = String(max_length=20)
    color = String(max_length=50)
    image_url = String(max_length=500)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    subtotal = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    pricing = ValueObject(OrderPricing)
    payment = ValueObject(PaymentDetails)
    shipping_address = ValueObject(ShippingAddress)
    customer = ValueObject(CustomerContact)
    delivery = ValueObject(DeliveryDetails)
    timeline = Text()
    return_request = ValueObject(ReturnRequest)
    coupon_code = String(max_length=50)
    customer_notes = Text()
    created_at = DateTime()
    updated_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def item_subtotals_are_locked_to_unit_price(self):
        for item in self.items:
            if abs(item.subtotal - round(item.unit_price * item.quantity, 2)) > 0.005:
                raise ValidationError({"items": [f"Subtotal of {item.title} must equal unit price x quantity"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        customer_id,
        items,
        pricing,
        payment_method,
        shipping_address,
        customer=None,
        coupon_code=None,
        customer_notes=None,
        gateway_intent_id=None,
    ):
        """Materialize an order from priced line dicts.

        Each line needs product_id, variant_sku, title, quantity and
        unit_price; product_slug, size, color and image_url are optional.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            status=OrderStatus.PENDING.value,
            pricing=pricing,
            payment=PaymentDetails(
                method=payment_method,
                status=PaymentStatus.PENDING.value,
                gateway_intent_id=gateway_intent_id,
            ),
            shipping_address=ShippingAddress(**shipping_address),
            customer=CustomerContact(**customer) if customer else None,
            delivery=DeliveryDetails(
                estimated_date=estimated_delivery(now.date()),
                window=delivery_window(now.date()),
            ),
            timeline=progress.initial_order_timeline(now),
            coupon_code=coupon_code,
            customer_notes=customer_notes,
            created_at=now,
            updated_at=now,
        )

        for line in items:
            order.add_items(
                OrderItem(
                    product_id=line["product_id"],
                    product_slug=line.get("product_slug"),
                    variant_sku=line["variant_sku"],
                    title=line["title"],
                    size=line.get("size"),
                    color=line.get("color"),
                    image_url=line.get("image_url"),
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    subtotal=round(line["unit_price"] * line["quantity"], 2),
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                grand_total=pricing.grand_total,
                item_count=sum(line["quantity"] for line in items),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def item_for(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def stock_lines(self) -> list[tuple]:
        """``(product_id, variant_sku, quantity)`` for every ordered line."""
        return [(str(i.product_id), i.variant_sku, i.quantity) for i in self.items]

    def can_transition_to(self, target) -> bool:
        return OrderStatus(target) in _VALID_TRANSITIONS[OrderStatus(self.status)]

    def _replace(self, field_name, **changes):
        current = getattr(self, field_name)
        values = {name: getattr(current, name) for name in declared_fields(current)} if current else {}
        values.update(changes)
        setattr(self, field_name, type(current)(**values) if current else changes)

    def _transition(self, target, description=None):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(f"Cannot transition from {current.value} to {target.value}")

        now = datetime.now(UTC)
        title, default_description = _STATUS_TIMELINE[target]
        self.status = target.value
        self.timeline = progress.append(
            self.timeline,
            title,
            description or default_description,
            terminal=target in _TERMINAL_STATES,
            timestamp=now,
        )
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
        return now

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_status(self, status, tracking_number=None, courier=None, note=None):
        """Move to ``status`` following the transition table.

        Returns the stock lines to restore, which is non-empty only when the
        order is cancelled.
        """
        try:
            target = OrderStatus(status)
        except ValueError:
            raise ValidationFailed(f"Unknown order status {status}", field="status") from None

        if target == OrderStatus.CANCELLED:
            return self.cancel(reason=note)
        if target == OrderStatus.REFUNDED:
            self.refund()
            return []

        now = self._transition(target, note)

        changes = {}
        if tracking_number:
            changes["tracking_number"] = tracking_number
        if courier:
            changes["courier"] = courier
        if target == OrderStatus.DELIVERED:
            changes["delivered_at"] = now
        if changes:
            self._replace("delivery", **changes)
        return []

    def confirm_payment(self, transaction_id, gateway_intent_id=None):
        if PaymentStatus(self.payment.status) == PaymentStatus.COMPLETED:
            raise InvalidTransition("Payment is already confirmed", field="payment")

        now = self._transition(OrderStatus.CONFIRMED)
        changes = {"status": PaymentStatus.COMPLETED.value, "transaction_id": transaction_id, "paid_at": now}
        if gateway_intent_id:
            changes["gateway_intent_id"] = gateway_intent_id
        self._replace("payment", **changes)

        self.raise_(
            OrderPaymentConfirmed(
                order_id=str(self.id),
                transaction_id=transaction_id,
                amount=self.pricing.grand_total,
                paid_at=now,
            )
        )

    def cancel(self, reason=None):
        """Cancel the order and return the stock lines to put back on the shelf."""
        now = self._transition(OrderStatus.CANCELLED, f"Reason: {reason}" if reason else None)
        self.cancelled_at = now
        if reason:
            note = f"Cancellation reason: {reason}"
            self.customer_notes = f"{self.customer_notes}\n{note}" if self.customer_notes else note

        self.raise_(OrderCancelled(order_id=str(self.id), reason=reason, cancelled_at=now))
        return self.stock_lines()

    def refund(self, refund_id=None, note=None):
        now = self._transition(OrderStatus.REFUNDED, note)
        self._replace("payment", status=PaymentStatus.REFUNDED.value, refunded_at=now, refund_id=refund_id)
        self.raise_(OrderRefunded(order_id=str(self.id), amount=self.pricing.grand_total, refunded_at=now))

    # -------------------------------------------------------------------
    # Returns
    # -------------------------------------------------------------------
    def request_return(self, items, reason, customer_notes=None, evidence=None):
        """Open a return for some or all delivered items.

        ``items`` is a list of ``{"item_id", "quantity"}`` selections.
        """
        if OrderStatus(self.status) != OrderStatus.DELIVERED:
            raise InvalidTransition("Returns can only be requested for delivered orders", field="return_request")
        if self.return_request is not None and self.return_request.is_active:
            raise ReturnAlreadyActive("A return request is already in progress for this order")
        if not reason or not str(reason).strip():
            raise ValidationFailed("A reason is required to request a return", field="reason")
        if not items:
            raise ValidationFailed("Select at least one item to return", field="items")

        selected = []
        seen = set()
        for selection in items:
            item_id = str(selection.get("item_id") or "")
            order_item = self.item_for(item_id)
            if order_item is None:
                raise NotFound(f"Item {item_id} is not part of this order", field="items")
            if item_id in seen:
                raise DuplicateReturnItem(f"Item {item_id} was selected more than once")
            seen.add(item_id)

            quantity = selection.get("quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= order_item.quantity:
                raise ValidationFailed(
                    f"Return quantity for {order_item.title} must be between 1 and {order_item.quantity}",
                    field="items",
                )

            selected.append(
                {
                    "item_id": item_id,
                    "product_id": str(order_item.product_id),
                    "variant_sku": order_item.variant_sku,
                    "title": order_item.title,
                    "quantity": quantity,
                    "unit_price": order_item.unit_price,
                }
            )

        now = datetime.now(UTC)
        title, description = _RETURN_TIMELINE[ReturnStatus.REQUESTED]
        refund_amount = round(sum(line["unit_price"] * line["quantity"] for line in selected), 2)

        self.return_request = ReturnRequest(
            status=ReturnStatus.REQUESTED.value,
            reason=reason,
            customer_notes=customer_notes,
            refund_amount=refund_amount,
            items=json.dumps(selected),
            evidence=json.dumps(list(evidence or [])),
            timeline=progress.append(None, title, description, timestamp=now),
            requested_at=now,
            updated_at=now,
        )
        self.updated_at = now

        self.raise_(
            ReturnRequested(
                order_id=str(self.id),
                reason=reason,
                refund_amount=refund_amount,
                item_count=sum(line["quantity"] for line in selected),
                requested_at=now,
            )
        )
        return self.return_request

    def update_return_request(
        self,
        status=None,
        admin_notes=None,
        resolution=None,
        refund_amount=None,
        processed_by=None,
    ):
        """Move the return through its status machine and/or update its admin fields.

        Returns the new return status.
        """
        if self.return_request is None:
            raise NotFound("No return request found for this order", field="return_request")

        current = ReturnStatus(self.return_request.status)
        target = current
        if status is not None:
            try:
                target = ReturnStatus(status)
            except ValueError:
                raise ValidationFailed(f"Unknown return status {status}", field="status") from None

        now = datetime.now(UTC)
        changes = {"updated_at": now}

        if target != current:
            if target not in _RETURN_TRANSITIONS[current]:
                raise InvalidTransition(f"Cannot move return request from {current.value} to {target.value}")

            title, description = _RETURN_TIMELINE[target]
            changes["status"] = target.value
            changes["timeline"] = progress.append(
                self.return_request.timeline,
                title,
                description,
                terminal=target in _RETURN_FINAL_STATES,
                timestamp=now,
            )
            if target in _RETURN_FINAL_STATES:
                changes["resolved_at"] = now
            elif current in _RETURN_FINAL_STATES:
                changes["resolved_at"] = None

        if admin_notes is not None:
            changes["admin_notes"] = admin_notes
        if resolution is not None:
            changes["resolution"] = resolution
        if refund_amount is not None:
            changes["refund_amount"] = refund_amount
        if processed_by is not None:
            changes["processed_by"] = processed_by

        self._replace("return_request", **changes)
        self.updated_at = now

        if target != current:
            self.raise_(
                ReturnStatusChanged(
                    order_id=str(self.id),
                    previous_status=current.value,
                    new_status=target.value,
                    changed_at=now,
                )
            )
        return target

    def cancel_return_request(self):
        return self.update_return_request(status=ReturnStatus.CANCELLED.value)

    def returned_stock_lines(self) -> list[tuple]:
        if self.return_request is None:
            return []
        return [
            (line["product_id"], line["variant_sku"], line["quantity"]) for line in self.return_request.returned_items
        ]
