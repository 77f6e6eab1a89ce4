"""BDD tests for the customer address book."""

import pytest
from factories import make_customer
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/address_book.feature")


def _details(city, n=1):
    return {
        "recipient": "Asha Rao",
        "phone": "9876543210",
        "address_line1": f"{n} Main Road",
        "city": city,
        "state": "State",
        "postal_code": f"{600000 + n}",
    }


@pytest.fixture()
def error():
    return {"exc": None}


@given("a registered customer without addresses", target_fixture="customer")
def customer_without_addresses():
    return make_customer(with_address=False)


@given(
    parsers.cfparse('a registered customer with addresses in "{first}", "{second}" and "{third}"'),
    target_fixture="customer",
)
def customer_with_three_addresses(first, second, third):
    customer = make_customer(with_address=False)
    for n, city in enumerate((first, second, third), start=1):
        customer.add_address(**_details(city, n))
    customer._events.clear()
    return customer


@given(parsers.cfparse("a registered customer with {count:d} addresses"), target_fixture="customer")
def customer_with_many_addresses(count):
    customer = make_customer(with_address=False)
    for n in range(count):
        customer.add_address(**_details(f"City {n}", n))
    customer._events.clear()
    return customer


@when(parsers.cfparse('the customer adds an address in "{city}"'))
def add_address(customer, city, error):
    try:
        customer.add_address(**_details(city, 99))
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the address in "{city}" is removed'))
def remove_address(customer, city):
    address = next(a for a in customer.addresses if a.city == city)
    customer.remove_address(address.id)


@then(parsers.cfparse("the customer has {count:d} address"))
@then(parsers.cfparse("the customer has {count:d} addresses"))
def address_count(customer, count):
    assert len(customer.addresses) == count


@then(parsers.cfparse('the default address is in "{city}"'))
def default_address_city(customer, city):
    assert customer.default_address.city == city


@then("the action fails with a validation error")
def action_fails(error):
    assert isinstance(error["exc"], ValidationError)
