"""Coupon service port.

Checkout asks the coupon service how much a code takes off an order. An
unusable code is not an error: the result simply carries no discount and
the reason it was refused.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class CouponKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free_shipping"


@dataclass(frozen=True)
class Coupon:
    code: str
    kind: CouponKind
    value: float = 0.0
    max_discount: float | None = None
    min_order_amount: float = 0.0
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    usage_limit: int | None = None
    per_customer_limit: int = 1
    active: bool = True


@dataclass(frozen=True)
class DiscountResult:
    """Outcome of applying a coupon to an order subtotal."""

    applied: bool
    discount: float = 0.0
    free_shipping: bool = False
    reason: str | None = None
    metadata: dict = field(default_factory=dict)


class CouponService(ABC):
    @abstractmethod
    def compute_discount(self, code: str, subtotal: float, customer_id: str) -> DiscountResult:
        """Work out the discount ``code`` grants on ``subtotal`` for this customer."""
        ...

    @abstractmethod
    def record_redemption(self, code: str, customer_id: str, order_id: str, discount: float) -> None:
        """Count one use of ``code`` against its usage limits."""
        ...
