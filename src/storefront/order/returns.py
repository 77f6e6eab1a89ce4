"""Order returns: commands and handler.

Customers open and cancel return requests on their delivered orders; admins
move them through review, transit and receipt. Completing a return puts the
returned quantities back in stock.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ValidationFailed
from storefront.order.lifecycle import load_order, restock
from storefront.order.order import Order, ReturnStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class RequestReturn:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {"item_id", "quantity"}
    reason = String(required=True, max_length=500)
    customer_notes = Text()
    evidence = Text()  # JSON: list of image URLs


@storefront.command(part_of="Order")
class UpdateReturnRequest:
    order_id = Identifier(required=True)
    status = String(max_length=20)
    admin_notes = Text()
    resolution = String(max_length=100)
    refund_amount = Float(min_value=0.0)
    processed_by = String(max_length=100)


@storefront.command(part_of="Order")
class CancelReturnRequest:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


def _json_list(raw, field):
    if not raw:
        return []
    try:
        value = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        raise ValidationFailed("Must be a JSON list", field=field) from None
    if not isinstance(value, list):
        raise ValidationFailed("Must be a JSON list", field=field)
    return value


@storefront.command_handler(part_of=Order)
class ManageReturnsHandler:
    @handle(RequestReturn)
    def request_return(self, command):
        order = load_order(command.order_id, customer_id=command.customer_id)
        order.request_return(
            items=_json_list(command.items, "items"),
            reason=command.reason,
            customer_notes=command.customer_notes,
            evidence=_json_list(command.evidence, "evidence"),
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Return requested",
            order_id=str(order.id),
            refund_amount=order.return_request.refund_amount,
        )
        return str(order.id)

    @handle(UpdateReturnRequest)
    def update_return_request(self, command):
        order = load_order(command.order_id)
        previous = order.return_request.status if order.return_request else None
        status = order.update_return_request(
            status=command.status,
            admin_notes=command.admin_notes,
            resolution=command.resolution,
            refund_amount=command.refund_amount,
            processed_by=command.processed_by,
        )
        current_domain.repository_for(Order).add(order)

        if status == ReturnStatus.COMPLETED and previous != ReturnStatus.COMPLETED.value:
            restock(order.returned_stock_lines())
            logger.info("Returned items restocked", order_id=str(order.id))
        return str(order.id)

    @handle(CancelReturnRequest)
    def cancel_return_request(self, command):
        order = load_order(command.order_id, customer_id=command.customer_id)
        order.cancel_return_request()
        current_domain.repository_for(Order).add(order)
        return str(order.id)
