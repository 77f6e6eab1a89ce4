"""Order status changes: admin status updates, payment confirmation, cancellation and refunds."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import InvalidTransition, NotFound, ValidationFailed
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.payments.gateway import get_gateway

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    tracking_number = String(max_length=100)
    courier = String(max_length=100)
    note = String(max_length=500)


@storefront.command(part_of="Order")
class ConfirmOrderPayment:
    order_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=255)


@storefront.command(part_of="Order")
class CancelOrder:
    """Customer-initiated cancellation. Only the order's owner may cancel it."""

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)


def load_order(identifier, customer_id=None):
    """Find an order by id or order number, hiding orders owned by someone else."""
    repo = current_domain.repository_for(Order)
    order = repo.find(identifier) or repo.find_by_order_number(identifier)
    if order is None or (customer_id is not None and str(order.customer_id) != str(customer_id)):
        raise NotFound("Order not found", field="order_id")
    return order


def restock(lines, track_sales=True):
    """Put ``(product_id, sku, quantity)`` lines back on the shelf."""
    if not lines:
        return
    current_domain.repository_for(Product).adjust_stock(
        [(product_id, sku, quantity) for product_id, sku, quantity in lines],
        track_sales=track_sales,
    )


def refund_payment(order, note=None):
    """Move a cancelled order to refunded, returning online payments through the gateway.

    The transition is checked before any money moves. The gateway's refund id
    is logged and recorded on the order so the refund can be matched to it
    even if the save fails.
    """
    if not order.can_transition_to(OrderStatus.REFUNDED):
        raise InvalidTransition(f"Cannot transition from {order.status} to {OrderStatus.REFUNDED.value}")

    refund_id = None
    paid = PaymentStatus(order.payment.status) == PaymentStatus.COMPLETED
    if paid and order.payment.transaction_id:
        result = get_gateway().refund(order.payment.transaction_id, order.pricing.grand_total, reason=note)
        if not result.success:
            raise ValidationFailed(f"Refund failed: {result.failure_reason}", field="payment")
        refund_id = result.gateway_refund_id
        logger.info(
            "Gateway refund issued",
            order_id=str(order.id),
            transaction_id=order.payment.transaction_id,
            refund_id=refund_id,
            amount=order.pricing.grand_total,
        )

    order.refund(refund_id=refund_id, note=note)


@storefront.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = load_order(command.order_id)
        previous = order.status

        if command.status == OrderStatus.REFUNDED.value:
            refund_payment(order, note=command.note)
            current_domain.repository_for(Order).add(order)
            logger.info("Order status updated", order_id=str(order.id), previous_status=previous, status=order.status)
            return str(order.id)

        restored = order.update_status(
            command.status,
            tracking_number=command.tracking_number,
            courier=command.courier,
            note=command.note,
        )
        current_domain.repository_for(Order).add(order)
        restock(restored)

        logger.info("Order status updated", order_id=str(order.id), previous_status=previous, status=order.status)
        return str(order.id)

    @handle(ConfirmOrderPayment)
    def confirm_order_payment(self, command):
        order = load_order(command.order_id)
        order.confirm_payment(command.transaction_id)
        current_domain.repository_for(Order).add(order)
        return str(order.id)

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id, customer_id=command.customer_id)
        restored = order.cancel(reason=command.reason)
        current_domain.repository_for(Order).add(order)
        restock(restored)

        logger.info("Order cancelled", order_id=str(order.id), reason=command.reason)
        return str(order.id)

    @handle(RefundOrder)
    def refund_order(self, command):
        order = load_order(command.order_id)
        refund_payment(order)
        current_domain.repository_for(Order).add(order)
        return str(order.id)
