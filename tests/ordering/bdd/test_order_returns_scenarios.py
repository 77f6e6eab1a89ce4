import json

from factories import reload_order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.order.lifecycle import UpdateOrderStatus
from storefront.order.returns import RequestReturn, UpdateReturnRequest

scenarios("features/order_returns.feature")


@given("the order has been delivered")
def order_delivered(order):
    for status in ("confirmed", "processing", "packed", "shipped", "out-for-delivery", "delivered"):
        current_domain.process(UpdateOrderStatus(order_id=str(order.id), status=status), asynchronous=False)


@given(parsers.cfparse('the customer asks to return {quantity:d} item because "{reason}"'))
@given(parsers.cfparse('the customer asks to return {quantity:d} items because "{reason}"'))
@when(parsers.cfparse('the customer asks to return {quantity:d} item because "{reason}"'))
@when(parsers.cfparse('the customer asks to return {quantity:d} items because "{reason}"'))
def request_return(order, customer, quantity, reason, context):
    try:
        current_domain.process(
            RequestReturn(
                order_id=str(order.id),
                customer_id=str(customer.id),
                items=json.dumps([{"item_id": str(order.items[0].id), "quantity": quantity}]),
                reason=reason,
            ),
            asynchronous=False,
        )
    except ValidationError as exc:
        context["error"] = exc


@given(parsers.cfparse('the return moves to "{status}"'))
@when(parsers.cfparse('the return moves to "{status}"'))
def return_moves_to(order, status, context):
    try:
        current_domain.process(UpdateReturnRequest(order_id=str(order.id), status=status), asynchronous=False)
    except ValidationError as exc:
        context["error"] = exc


@then(parsers.cfparse('the return status is "{status}"'))
def return_status_is(order, status):
    assert reload_order(order.id).return_request.status == status


@then(parsers.cfparse("the refund amount is {amount:f}"))
def refund_amount_is(order, amount):
    assert reload_order(order.id).return_request.refund_amount == amount
