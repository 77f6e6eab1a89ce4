from storefront.domain import storefront
from storefront.wishlist.wishlist import Wishlist


@storefront.repository(part_of=Wishlist)
class WishlistRepository:
    def for_customer(self, customer_id):
        wishlists = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return wishlists[0] if wishlists else None

    def get_or_create(self, customer_id):
        return self.for_customer(customer_id) or Wishlist.create(customer_id=str(customer_id))
