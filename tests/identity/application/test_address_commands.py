"""Application tests for address management via domain.process()."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from storefront.errors import NotFound
from storefront.identity.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from storefront.identity.customer import Customer
from storefront.identity.registration import RegisterCustomer


def _register():
    return current_domain.process(
        RegisterCustomer(first_name="Asha", last_name="Rao", email="asha@example.com"),
        asynchronous=False,
    )


def _add(customer_id, line1="12 MG Road", **extra):
    return current_domain.process(
        AddAddress(
            customer_id=customer_id,
            recipient="Asha Rao",
            phone="9876543210",
            address_line1=line1,
            city="Bengaluru",
            state="Karnataka",
            postal_code="560001",
            **extra,
        ),
        asynchronous=False,
    )


class TestAddressManagementFlow:
    def test_add_first_address(self):
        customer_id = _register()
        address_id = _add(customer_id)

        customer = current_domain.repository_for(Customer).get(customer_id)
        assert len(customer.addresses) == 1
        assert str(customer.addresses[0].id) == address_id
        assert customer.addresses[0].is_default is True

    def test_update_address(self):
        customer_id = _register()
        address_id = _add(customer_id)

        current_domain.process(
            UpdateAddress(customer_id=customer_id, address_id=address_id, city="Mysuru"),
            asynchronous=False,
        )

        customer = current_domain.repository_for(Customer).get(customer_id)
        assert customer.addresses[0].city == "Mysuru"
        assert customer.addresses[0].address_line1 == "12 MG Road"

    def test_set_default_and_remove(self):
        customer_id = _register()
        first = _add(customer_id)
        second = _add(customer_id, line1="7 Church Street")

        current_domain.process(SetDefaultAddress(customer_id=customer_id, address_id=second), asynchronous=False)
        current_domain.process(RemoveAddress(customer_id=customer_id, address_id=second), asynchronous=False)

        customer = current_domain.repository_for(Customer).get(customer_id)
        assert [str(a.id) for a in customer.addresses] == [first]
        assert customer.addresses[0].is_default is True

    def test_unknown_address(self):
        customer_id = _register()
        with pytest.raises(NotFound):
            current_domain.process(RemoveAddress(customer_id=customer_id, address_id="missing"), asynchronous=False)

    def test_unknown_customer(self):
        with pytest.raises(ObjectNotFoundError):
            _add("no-such-customer")
