"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway for production (stub)

The default adapter is chosen by the ``PAYMENT_GATEWAY`` setting.
"""

from storefront.config import get_settings
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.gateway.port import PaymentGateway
from storefront.payments.gateway.stripe_adapter import StripeGateway

_current_gateway: PaymentGateway | None = None


def build_gateway(name: str | None = None) -> PaymentGateway:
    settings = get_settings()
    name = (name or settings.payment_gateway).lower()
    if name == "stripe":
        return StripeGateway(api_key=settings.stripe_api_key, webhook_secret=settings.payment_webhook_secret)
    if name == "fake":
        return FakeGateway()
    raise ValueError(f"Unknown payment gateway {name!r}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building the configured one on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
