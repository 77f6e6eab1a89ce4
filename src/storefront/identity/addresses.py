"""Customer address book: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.customer import Customer

_ADDRESS_FIELDS = (
    "label",
    "recipient",
    "phone",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "country",
    "is_default",
)


@storefront.command(part_of="Customer")
class AddAddress:
    customer_id: Identifier(required=True)
    label: String(max_length=20)
    recipient: String(required=True, max_length=100)
    phone: String(required=True, max_length=20)
    address_line1: String(required=True, max_length=255)
    address_line2: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    postal_code: String(required=True, max_length=20)
    country: String(max_length=100)
    is_default: Boolean(default=False)


@storefront.command(part_of="Customer")
class UpdateAddress:
    """Modify fields of an existing address. Fields left empty keep their value."""

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    label: String(max_length=20)
    recipient: String(max_length=100)
    phone: String(max_length=20)
    address_line1: String(max_length=255)
    address_line2: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100)
    is_default: Boolean()


@storefront.command(part_of="Customer")
class RemoveAddress:
    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.command(part_of="Customer")
class SetDefaultAddress:
    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


def _provided(command):
    return {field: getattr(command, field) for field in _ADDRESS_FIELDS if getattr(command, field, None) is not None}


@storefront.command_handler(part_of=Customer)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        address = customer.add_address(**_provided(command))
        repo.add(customer)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.update_address(command.address_id, **_provided(command))
        repo.add(customer)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.remove_address(command.address_id)
        repo.add(customer)

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.set_default_address(command.address_id)
        repo.add(customer)
