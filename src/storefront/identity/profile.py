"""Customer profile: the profile update command and the My Account read side."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.management import cart_summary
from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.identity.customer import Customer
from storefront.order.queries import order_stats
from storefront.wishlist.sync import wishlist_summary


@storefront.command(part_of="Customer")
class UpdateProfile:
    customer_id: Identifier(required=True)
    first_name: String(required=True, max_length=100)
    last_name: String(max_length=100)
    phone: String(max_length=20)


@storefront.command_handler(part_of=Customer)
class ManageProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        customer = load_customer(command.customer_id)
        customer.update_profile(
            first_name=command.first_name,
            last_name=command.last_name,
            phone=command.phone,
        )
        current_domain.repository_for(Customer).add(customer)
        return str(customer.id)


def load_customer(customer_id):
    try:
        return current_domain.repository_for(Customer).get(customer_id)
    except ObjectNotFoundError:
        raise NotFound("Customer not found", field="customer_id") from None


def account_summary(customer_id) -> dict:
    """Everything the My Account page shows at a glance, without touching any aggregate."""
    customer = load_customer(customer_id)
    stats = order_stats(customer_id)
    return {
        "customer": customer,
        "orders": stats,
        "cart": cart_summary(customer_id),
        "wishlist": wishlist_summary(customer_id),
        "address_count": len(customer.addresses),
    }
