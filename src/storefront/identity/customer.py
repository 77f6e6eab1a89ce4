"""Customer aggregate root with its address book."""

from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, String

from storefront.domain import storefront
from storefront.errors import NotFound

MAX_ADDRESSES = 10


class AddressLabel(Enum):
    HOME = "Home"
    WORK = "Work"
    OTHER = "Other"


@storefront.entity(part_of="Customer")
class Address:
    """A delivery address. A customer holds up to 10, exactly one of them the default."""

    label: String(choices=AddressLabel, default=AddressLabel.HOME.value)
    recipient: String(required=True, max_length=100)
    phone: String(required=True, max_length=20)
    address_line1: String(required=True, max_length=255)
    address_line2: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    postal_code: String(required=True, max_length=20)
    country: String(max_length=100, default="India")
    is_default: Boolean(default=False)
    created_at: DateTime(default=datetime.now)

    def to_snapshot(self) -> dict:
        return {
            "address_id": str(self.id),
            "recipient": self.recipient,
            "phone": self.phone,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2 or "",
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }


@storefront.aggregate
class Customer:
    first_name: String(required=True, max_length=100)
    last_name: String(max_length=100)
    email: String(required=True, max_length=254, unique=True)
    phone: String(max_length=20)
    addresses: HasMany(Address)
    registered_at: DateTime(default=datetime.now)

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @classmethod
    def register(cls, first_name, email, last_name=None, phone=None):
        from storefront.identity.events import CustomerRegistered

        now = datetime.now()
        customer = cls(
            first_name=first_name,
            last_name=last_name,
            email=email.strip().lower(),
            phone=phone,
            registered_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=customer.id,
                email=customer.email,
                first_name=first_name,
                registered_at=now,
            )
        )
        return customer

    def update_profile(self, first_name, last_name=None, phone=None):
        from storefront.identity.events import ProfileUpdated

        self.first_name = first_name.strip()
        self.last_name = last_name.strip() if last_name else None
        self.phone = phone.strip() if phone else None

        self.raise_(
            ProfileUpdated(
                customer_id=self.id,
                first_name=self.first_name,
                last_name=self.last_name,
                phone=self.phone,
            )
        )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def default_address(self):
        return next((a for a in self.addresses if a.is_default), None)

    def address_for(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise NotFound(f"Address {address_id} not found", field="address_id")
        return address

    def add_address(self, **details):
        from storefront.identity.events import AddressAdded

        if len(self.addresses) >= MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

        # First address is always the default
        is_default = bool(details.pop("is_default", False)) or not self.addresses

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    addr.is_default = False

            address = Address(is_default=is_default, **details)
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                customer_id=self.id,
                address_id=address.id,
                city=address.city,
                postal_code=address.postal_code,
                is_default=is_default,
            )
        )
        return address

    def update_address(self, address_id, **changes):
        from storefront.identity.events import AddressUpdated

        address = self.address_for(address_id)
        make_default = changes.pop("is_default", None)

        with atomic_change(self):
            for field, value in changes.items():
                setattr(address, field, value)
            if make_default:
                for addr in self.addresses:
                    addr.is_default = addr is address

        self.raise_(AddressUpdated(customer_id=self.id, address_id=address.id))
        return address

    def remove_address(self, address_id):
        from storefront.identity.events import AddressRemoved

        address = self.address_for(address_id)
        was_default = address.is_default

        with atomic_change(self):
            self.remove_addresses(address)
            # Promote the oldest remaining address
            if was_default and self.addresses:
                oldest = min(self.addresses, key=lambda a: a.created_at or datetime.min)
                oldest.is_default = True

        self.raise_(AddressRemoved(customer_id=self.id, address_id=address_id))

    def set_default_address(self, address_id):
        from storefront.identity.events import DefaultAddressChanged

        address = self.address_for(address_id)
        previous = self.default_address

        with atomic_change(self):
            for addr in self.addresses:
                addr.is_default = False
            address.is_default = True

        self.raise_(
            DefaultAddressChanged(
                customer_id=self.id,
                address_id=address.id,
                previous_default_address_id=previous.id if previous else None,
            )
        )
