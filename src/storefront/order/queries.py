"""Read-side helpers for order listing and detail."""

from collections import Counter

from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.order.lifecycle import load_order
from storefront.order.order import Order, OrderStatus


def _pagination(page, limit, total):
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit if limit else 0,
    }


def list_orders(customer_id, status=None, page=1, limit=None) -> dict:
    limit = limit or get_settings().default_page_size
    orders, total = current_domain.repository_for(Order).for_customer(
        customer_id, status=status, page=page, limit=limit
    )
    return {"orders": orders, "pagination": _pagination(page, limit, total)}


def list_all_orders(status=None, page=1, limit=None) -> dict:
    limit = limit or get_settings().default_page_size
    orders, total = current_domain.repository_for(Order).list_all(status=status, page=page, limit=limit)
    return {"orders": orders, "pagination": _pagination(page, limit, total)}


def get_order(customer_id, identifier):
    return load_order(identifier, customer_id=customer_id)


RECENT_ORDER_COUNT = 5

# Money that never left the customer's account, or came back to it
_NOT_SPENT = {OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value}


def order_stats(customer_id) -> dict:
    """Order count, per-status breakdown, total spent and the most recent orders for one customer."""
    orders = current_domain.repository_for(Order).all_for_customer(customer_id)
    return {
        "total_orders": len(orders),
        "status_breakdown": dict(Counter(o.status for o in orders)),
        "total_spent": round(sum(o.pricing.grand_total for o in orders if o.status not in _NOT_SPENT), 2),
        "recent_orders": orders[:RECENT_ORDER_COUNT],
    }
