"""In-memory coupon book for development and testing.

Coupons are registered at runtime with ``add_coupon``; redemptions are
counted per code and per customer so usage limits behave like the real
thing.
"""

from collections import defaultdict
from datetime import UTC, datetime

from storefront.coupons.port import Coupon, CouponKind, CouponService, DiscountResult


class InMemoryCouponService(CouponService):
    def __init__(self) -> None:
        self.coupons: dict[str, Coupon] = {}
        self.redemptions: dict[str, list[dict]] = defaultdict(list)

    def add_coupon(self, coupon: Coupon) -> None:
        self.coupons[coupon.code.strip().upper()] = coupon

    def _refuse(self, reason: str) -> DiscountResult:
        return DiscountResult(applied=False, reason=reason)

    def compute_discount(self, code: str, subtotal: float, customer_id: str) -> DiscountResult:
        coupon = self.coupons.get((code or "").strip().upper())
        if coupon is None:
            return self._refuse("Coupon not found")
        if not coupon.active:
            return self._refuse("Coupon is inactive")

        now = datetime.now(UTC)
        if coupon.starts_at and now < coupon.starts_at:
            return self._refuse("Coupon not yet valid")
        if coupon.ends_at and now > coupon.ends_at:
            return self._refuse("Coupon has expired")

        uses = self.redemptions[coupon.code.upper()]
        if coupon.usage_limit is not None and len(uses) >= coupon.usage_limit:
            return self._refuse("Coupon usage limit reached")
        if sum(1 for use in uses if use["customer_id"] == str(customer_id)) >= coupon.per_customer_limit:
            return self._refuse("You have already used this coupon maximum times")
        if subtotal < coupon.min_order_amount:
            return self._refuse(f"Minimum order amount is {coupon.min_order_amount:g}")

        discount = 0.0
        if coupon.kind == CouponKind.PERCENTAGE:
            discount = subtotal * coupon.value / 100
            if coupon.max_discount:
                discount = min(discount, coupon.max_discount)
        elif coupon.kind == CouponKind.FIXED:
            discount = coupon.value

        return DiscountResult(
            applied=True,
            discount=round(min(discount, subtotal), 2),
            free_shipping=coupon.kind == CouponKind.FREE_SHIPPING,
            metadata={"code": coupon.code.upper(), "kind": coupon.kind.value, "value": coupon.value},
        )

    def record_redemption(self, code: str, customer_id: str, order_id: str, discount: float) -> None:
        self.redemptions[code.strip().upper()].append(
            {
                "customer_id": str(customer_id),
                "order_id": str(order_id),
                "discount": discount,
                "redeemed_at": datetime.now(UTC),
            }
        )
