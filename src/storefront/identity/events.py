"""Domain events for the Customer aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Customer")
class CustomerRegistered:
    __version__ = 1

    customer_id: Identifier(required=True)
    email: String(required=True)
    first_name: String(required=True)
    registered_at: DateTime(required=True)


@storefront.event(part_of="Customer")
class AddressAdded:
    """A new address was added to a customer's address book."""

    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    city: String(required=True)
    postal_code: String(required=True)
    is_default: Boolean(default=False)


@storefront.event(part_of="Customer")
class AddressUpdated:
    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.event(part_of="Customer")
class AddressRemoved:
    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.event(part_of="Customer")
class DefaultAddressChanged:
    __version__ = 1

    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    previous_default_address_id: Identifier()


@storefront.event(part_of="Customer")
class ProfileUpdated:
    __version__ = 1

    customer_id: Identifier(required=True)
    first_name: String(required=True)
    last_name: String()
    phone: String()
