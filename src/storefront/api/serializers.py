"""Aggregate to JSON payload conversion for API responses."""

import json


def _iso(value):
    return value.isoformat() if value is not None else None


def _json(raw):
    if not raw:
        return []
    return json.loads(raw) if isinstance(raw, str) else raw


def cart_item_payload(item) -> dict:
    return {
        "id": str(item.id),
        "product_id": str(item.product_id),
        "product_slug": item.product_slug,
        "variant_sku": item.variant_sku,
        "title": item.title,
        "unit_price": item.unit_price,
        "size": item.size,
        "color": item.color,
        "image_url": item.image_url,
        "quantity": item.quantity,
        "line_total": round(item.line_total, 2),
        "saved_for_later": item.saved_for_later,
        "added_at": _iso(item.added_at),
    }


def cart_payload(cart) -> dict:
    return {
        "id": str(cart.id),
        "customer_id": str(cart.customer_id),
        "items": [cart_item_payload(i) for i in cart.active_items],
        "saved_items": [cart_item_payload(i) for i in cart.saved_items],
        "totals": cart.summary(),
        "last_activity_at": _iso(cart.last_activity_at),
    }


def wishlist_payload(wishlist) -> dict:
    return {
        "id": str(wishlist.id),
        "customer_id": str(wishlist.customer_id),
        "name": wishlist.name,
        "is_public": wishlist.is_public,
        "item_count": wishlist.item_count,
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "product_slug": item.product_slug,
                "variant_sku": item.variant_sku,
                "title": item.title,
                "price": item.price,
                "size": item.size,
                "color": item.color,
                "image_url": item.image_url,
                "in_stock": item.in_stock,
                "priority": item.priority,
                "notes": item.notes,
                "added_at": _iso(item.added_at),
            }
            for item in wishlist.items
        ],
    }


def address_payload(address) -> dict:
    return {
        "id": str(address.id),
        "label": address.label,
        "recipient": address.recipient,
        "phone": address.phone,
        "address_line1": address.address_line1,
        "address_line2": address.address_line2,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "country": address.country,
        "is_default": address.is_default,
    }


def _return_payload(request):
    if request is None:
        return None
    return {
        "status": request.status,
        "reason": request.reason,
        "customer_notes": request.customer_notes,
        "admin_notes": request.admin_notes,
        "resolution": request.resolution,
        "refund_amount": request.refund_amount,
        "items": _json(request.items),
        "evidence": _json(request.evidence),
        "timeline": _json(request.timeline),
        "requested_at": _iso(request.requested_at),
        "updated_at": _iso(request.updated_at),
        "resolved_at": _iso(request.resolved_at),
        "processed_by": request.processed_by,
    }


def order_summary_payload(order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "item_count": sum(i.quantity for i in order.items),
        "grand_total": order.pricing.grand_total,
        "payment_status": order.payment.status,
        "created_at": _iso(order.created_at),
    }


def order_payload(order) -> dict:
    pricing = order.pricing
    payment = order.payment
    address = order.shipping_address
    delivery = order.delivery
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "customer_id": str(order.customer_id),
        "status": order.status,
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "product_slug": item.product_slug,
                "variant_sku": item.variant_sku,
                "title": item.title,
                "size": item.size,
                "color": item.color,
                "image_url": item.image_url,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "subtotal": item.subtotal,
            }
            for item in order.items
        ],
        "pricing": {
            "subtotal": pricing.subtotal,
            "shipping": pricing.shipping,
            "tax": pricing.tax,
            "discount": pricing.discount,
            "grand_total": pricing.grand_total,
            "currency": pricing.currency,
        },
        "payment": {
            "method": payment.method,
            "status": payment.status,
            "transaction_id": payment.transaction_id,
            "paid_at": _iso(payment.paid_at),
            "refunded_at": _iso(payment.refunded_at),
            "refund_id": payment.refund_id,
        },
        "shipping_address": {
            "address_id": str(address.address_id) if address.address_id else None,
            "recipient": address.recipient,
            "phone": address.phone,
            "address_line1": address.address_line1,
            "address_line2": address.address_line2,
            "city": address.city,
            "state": address.state,
            "postal_code": address.postal_code,
            "country": address.country,
        },
        "customer": (
            {"name": order.customer.name, "email": order.customer.email, "phone": order.customer.phone}
            if order.customer
            else None
        ),
        "delivery": {
            "estimated_date": _iso(delivery.estimated_date),
            "window": delivery.window,
            "tracking_number": delivery.tracking_number,
            "courier": delivery.courier,
            "delivered_at": _iso(delivery.delivered_at),
        },
        "timeline": _json(order.timeline),
        "return_request": _return_payload(order.return_request),
        "coupon_code": order.coupon_code,
        "customer_notes": order.customer_notes,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def profile_payload(customer) -> dict:
    default = customer.default_address
    return {
        "id": str(customer.id),
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "full_name": customer.full_name,
        "email": customer.email,
        "phone": customer.phone,
        "registered_at": _iso(customer.registered_at),
        "default_address": address_payload(default) if default else None,
    }


def order_stats_payload(stats) -> dict:
    return {
        "total_orders": stats["total_orders"],
        "status_breakdown": stats["status_breakdown"],
        "total_spent": stats["total_spent"],
        "recent_orders": [order_summary_payload(o) for o in stats["recent_orders"]],
    }


def account_summary_payload(summary) -> dict:
    return {
        "profile": profile_payload(summary["customer"]),
        "orders": order_stats_payload(summary["orders"]),
        "cart": summary["cart"],
        "wishlist": summary["wishlist"],
        "address_count": summary["address_count"],
    }
