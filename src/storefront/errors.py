"""Storefront error taxonomy.

Every error is a Protean ``ValidationError`` so aggregates and handlers raise
them the same way they raise field validation failures. Each carries a stable
``code`` and the HTTP ``status_code`` the API boundary maps it to.
"""

from protean.exceptions import ValidationError


class StorefrontError(ValidationError):
    code = "error"
    status_code = 400
    default_field = "_entity"

    def __init__(self, message, field=None, messages=None):
        self.message = message
        if messages is None:
            messages = {field or self.default_field: [message]}
        super().__init__(messages)


class NotFound(StorefrontError):
    code = "not_found"
    status_code = 404


class ValidationFailed(StorefrontError):
    code = "validation_failed"


class InsufficientStock(StorefrontError):
    code = "insufficient_stock"
    default_field = "quantity"

    def __init__(self, message, available, requested, field=None):
        self.available = available
        self.requested = requested
        super().__init__(message, field=field)


class InvalidTransition(StorefrontError):
    code = "invalid_transition"
    default_field = "status"


class EmptyCart(StorefrontError):
    code = "empty_cart"
    default_field = "cart"


class ProductUnavailable(StorefrontError):
    code = "product_unavailable"
    default_field = "product_id"


class VariantNotFound(StorefrontError):
    code = "variant_not_found"
    status_code = 404
    default_field = "variant_sku"


class VariantRequired(StorefrontError):
    code = "variant_required"
    default_field = "variant_sku"


class DuplicateReturnItem(StorefrontError):
    code = "duplicate_return_item"
    default_field = "items"


class ReturnAlreadyActive(StorefrontError):
    code = "return_already_active"
    status_code = 409
    default_field = "return_request"


class PaymentVerificationFailed(StorefrontError):
    code = "payment_verification_failed"
    default_field = "payment"


class FeatureNotImplemented(StorefrontError):
    code = "not_implemented"
    status_code = 501


class Unauthorized(StorefrontError):
    code = "unauthorized"
    status_code = 401


class Forbidden(StorefrontError):
    code = "forbidden"
    status_code = 403
