from protean.core.repository import BaseRepository

from storefront.domain import storefront
from storefront.cart.cart import Cart


@storefront.repository(part_of=Cart)
class CartRepository(BaseRepository):
    def add(self, cart):
        # Totals are derived state; recompute before every write
        cart.recalculate_totals()
        return super().add(cart)

    def for_customer(self, customer_id):
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None

    def get_or_create(self, customer_id):
        """Return the customer's cart, building an unsaved one on first access."""
        return self.for_customer(customer_id) or Cart.create(customer_id=str(customer_id))
