from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find(self, order_id):
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            return None

    def find_by_order_number(self, order_number):
        if not order_number:
            return None
        orders = self._dao.query.filter(order_number=str(order_number).strip().upper()).all().items
        return orders[0] if orders else None

    def exists_with_number(self, order_number) -> bool:
        return self.find_by_order_number(order_number) is not None

    def for_customer(self, customer_id, status=None, page=1, limit=10):
        """One page of a customer's orders, newest first, plus the total match count."""
        criteria = {"customer_id": str(customer_id)}
        if status:
            criteria["status"] = status
        return self._page(criteria, page, limit)

    def list_all(self, status=None, page=1, limit=10):
        return self._page({"status": status} if status else {}, page, limit)

    def _page(self, criteria, page, limit):
        page = max(int(page or 1), 1)
        limit = max(int(limit or 1), 1)
        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return result.items, result.total

    def all_for_customer(self, customer_id):
        """Every order the customer has placed, newest first."""
        return (
            self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at").limit(None).all().items
        )
