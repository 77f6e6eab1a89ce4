"""Application settings read from the environment.

Protean's own configuration (providers, brokers, processing mode) lives in
``domain.toml``. The values here cover storefront business rules and gateway
selection.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


@dataclass(frozen=True)
class Settings:
    free_shipping_threshold: float = 5000.0
    flat_shipping_fee: float = 150.0
    tax_rate: float = 0.06
    currency: str = "INR"
    payment_gateway: str = "fake"
    stripe_api_key: str = ""
    payment_webhook_secret: str = ""
    payment_intent_ttl_minutes: int = 30
    order_number_prefix: str = "ORD"
    default_page_size: int = 10


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    return Settings(
        free_shipping_threshold=_env_float("FREE_SHIPPING_THRESHOLD", 5000.0),
        flat_shipping_fee=_env_float("FLAT_SHIPPING_FEE", 150.0),
        tax_rate=_env_float("TAX_RATE", 0.06),
        currency=os.getenv("CURRENCY", "INR"),
        payment_gateway=os.getenv("PAYMENT_GATEWAY", "fake").lower(),
        stripe_api_key=os.getenv("STRIPE_API_KEY", ""),
        payment_webhook_secret=os.getenv("PAYMENT_WEBHOOK_SECRET", ""),
        payment_intent_ttl_minutes=_env_int("PAYMENT_INTENT_TTL_MINUTES", 30),
        order_number_prefix=os.getenv("ORDER_NUMBER_PREFIX", "ORD"),
        default_page_size=_env_int("DEFAULT_PAGE_SIZE", 10),
    )
