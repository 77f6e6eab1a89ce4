"""Storefront bounded context: catalogue, customers, carts, wishlists, orders and payments."""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
