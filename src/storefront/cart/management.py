"""Cart-level operations: clearing, catalogue reconciliation and checkout validation."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.cart.cart import Cart
from storefront.cart.catalogue_link import product_for_line

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class RefreshCart:
    """Load (or lazily create) the customer's cart and sync every snapshot with the catalogue."""

    customer_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ValidateCart:
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)
        cart.clear()
        repo.add(cart)
        return str(cart.id)

    @handle(RefreshCart)
    def refresh_cart(self, command):
        repo = current_domain.repository_for(Cart)
        existing = repo.for_customer(command.customer_id)
        cart = existing or Cart.create(customer_id=str(command.customer_id))

        changed = cart.refresh_from_catalogue(product_for_line)
        if changed or existing is None:
            repo.add(cart)
        return str(cart.id)

    @handle(ValidateCart)
    def validate_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)

        issues, updated_items = cart.validate(product_for_line)
        if updated_items:
            repo.add(cart)
            logger.info("Cart prices refreshed during validation", cart_id=str(cart.id), updated=len(updated_items))

        return {
            "valid": not issues,
            "issues": issues,
            "updated_items": updated_items,
            "cart_id": str(cart.id),
        }


def cart_summary(customer_id) -> dict:
    """Totals for the customer's cart without reconciling or persisting anything."""
    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    if cart is None:
        return {"item_count": 0, "subtotal": 0.0, "saved_item_count": 0}
    return cart.summary()
