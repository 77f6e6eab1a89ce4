"""Caller identity from request headers.

Authentication happens upstream; the storefront trusts ``X-Customer-Id``
and ``X-Admin`` as set by the gateway in front of it.
"""

from fastapi import Depends, Header

from storefront.errors import Forbidden, Unauthorized


def current_customer(x_customer_id: str | None = Header(default=None)) -> str:
    if not x_customer_id or not x_customer_id.strip():
        raise Unauthorized("Authentication required", field="x-customer-id")
    return x_customer_id.strip()


def current_admin(
    customer_id: str = Depends(current_customer),
    x_admin: str | None = Header(default=None),
) -> str:
    if (x_admin or "").strip().lower() != "true":
        raise Forbidden("Admin access required", field="x-admin")
    return customer_id
