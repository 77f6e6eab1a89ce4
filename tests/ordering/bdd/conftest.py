"""Shared steps for ordering scenarios."""

import pytest
from factories import checkout, reload_order, reload_product, save_customer, save_product
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

from storefront.order.lifecycle import UpdateOrderStatus


@pytest.fixture()
def context():
    return {"error": None}


@given(parsers.cfparse('a product "{sku}" priced at {price:f} with {stock:d} units in stock'), target_fixture="product")
def product_in_stock(sku, price, stock):
    return save_product(variants=((sku, "M", "White", price, stock),))


@given("a customer with a delivery address", target_fixture="customer")
def customer_with_address():
    return save_customer()


@given(parsers.cfparse('the customer has ordered {quantity:d} of "{sku}"'), target_fixture="order")
def customer_ordered(customer, product, quantity, sku):
    return checkout(customer, product=product.slug, sku=sku, quantity=quantity)


@given(parsers.cfparse('the order has moved to "{status}"'))
@when(parsers.cfparse('the order moves to "{status}"'))
def order_moves_to(order, status, context):
    try:
        current_domain.process(UpdateOrderStatus(order_id=str(order.id), status=status), asynchronous=False)
    except ValidationError as exc:
        context["error"] = exc


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert reload_order(order.id).status == status


@then(parsers.cfparse('"{sku}" has {stock:d} units in stock'))
def units_in_stock(product, sku, stock):
    assert reload_product(product.id).variant_for(sku).stock == stock


@then(parsers.cfparse('the action is refused with "{code}"'))
def action_refused(context, code):
    assert context["error"] is not None
    assert context["error"].code == code
