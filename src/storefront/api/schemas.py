"""Pydantic request schemas for the storefront API.

These are external contracts, kept separate from the internal Protean
commands they are translated into.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str = Field(description="Product id, slug or variant SKU")
    variant_sku: str
    quantity: int = Field(default=1, ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [{"product_id": "classic-linen-shirt", "variant_sku": "CLS-M-WHT", "quantity": 2}]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------
class AddWishlistItemRequest(BaseModel):
    product_id: str
    variant_sku: str | None = None
    priority: str | None = None
    notes: str | None = Field(default=None, max_length=500)


class UpdateWishlistItemRequest(BaseModel):
    priority: str | None = None
    notes: str | None = Field(default=None, max_length=500)
    variant_sku: str | None = None


class MoveToCartRequest(BaseModel):
    quantity: int = Field(default=1, ge=1)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str
    variant_sku: str
    quantity: int = Field(ge=1)


class CreateOrderRequest(BaseModel):
    shipping_address_id: str
    payment_method: str = "cod"
    coupon_code: str | None = None
    customer_notes: str | None = None
    items: list[OrderItemRequest] | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class ReturnItemRequest(BaseModel):
    item_id: str
    quantity: int


class RequestReturnRequest(BaseModel):
    items: list[ReturnItemRequest]
    reason: str = Field(max_length=500)
    customer_notes: str | None = None
    evidence: list[str] = Field(default_factory=list)


class UpdateOrderStatusRequest(BaseModel):
    status: str
    tracking_number: str | None = None
    courier: str | None = None
    note: str | None = Field(default=None, max_length=500)


class UpdateReturnRequestRequest(BaseModel):
    status: str | None = None
    admin_notes: str | None = None
    resolution: str | None = None
    refund_amount: float | None = Field(default=None, ge=0)
    processed_by: str | None = None


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
class AddressRequest(BaseModel):
    label: str | None = None
    recipient: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str | None = None
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    label: str | None = None
    recipient: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    is_default: bool | None = None


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreatePaymentIntentRequest(BaseModel):
    shipping_address_id: str
    payment_method: str = "card"
    coupon_code: str | None = None
    customer_notes: str | None = None


class VerifyPaymentRequest(BaseModel):
    intent_id: str
    transaction_id: str
    signature: str


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------
class UpdateProfileRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
