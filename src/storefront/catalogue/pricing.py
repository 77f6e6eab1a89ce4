"""Unit price resolution for catalogue products.

Cart and wishlist snapshots and checkout all derive prices from here, so the
precedence rules live in exactly one place.
"""

import math
from collections.abc import Mapping
from numbers import Real

_VARIANT_PRICE_FIELDS = ("price_override", "price")
_PRODUCT_PRICE_FIELDS = ("sale_price", "base_price", "price")


def _read(source, name):
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def as_price(value):
    """Return ``value`` as a float when it is a finite number, else None.

    Booleans, strings and other non-numeric values count as missing.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def resolve_price(product, variant=None) -> float:
    """Authoritative unit price for a product, optionally narrowed to a variant.

    Precedence: variant.price_override, variant.price, product.sale_price,
    product.base_price, product.price. Zero only when none of them is a
    finite number.
    """
    candidates = [_read(variant, name) for name in _VARIANT_PRICE_FIELDS]
    candidates += [_read(product, name) for name in _PRODUCT_PRICE_FIELDS]

    for candidate in candidates:
        price = as_price(candidate)
        if price is not None:
            return price
    return 0.0


def checkout_unit_price(product, variant) -> float:
    """Price locked into an order line: the variant's sale price when set, else its list price."""
    for candidate in (_read(variant, "sale_price"), _read(variant, "price")):
        price = as_price(candidate)
        if price:
            return price
    return resolve_price(product, variant)
