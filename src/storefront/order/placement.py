"""Order creation: turning a customer's cart into an order.

Placing an order re-checks every active cart line against the live
catalogue, prices it, persists the order, takes the stock off the shelf and
empties the cart. All of it runs inside the command handler's unit of work:
if any step fails, none of the changes are committed.

``prepare_checkout`` and ``place_order`` are shared with the payment
confirmation flow, which places the order already confirmed.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.pricing import checkout_unit_price
from storefront.catalogue.product import Product
from storefront.config import get_settings
from storefront.coupons import get_coupon_service
from storefront.coupons.port import DiscountResult
from storefront.domain import storefront
from storefront.errors import (
    EmptyCart,
    FeatureNotImplemented,
    InsufficientStock,
    NotFound,
    ProductUnavailable,
    VariantNotFound,
)
from storefront.identity.customer import Customer
from storefront.cart.cart import Cart
from storefront.cart.catalogue_link import product_for_line
from storefront.order.numbering import unique_order_number
from storefront.order.order import Order, OrderPricing

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    shipping_address_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)
    coupon_code = String(max_length=50)
    customer_notes = Text()
    items = Text()  # JSON: explicit item list; only ordering from the cart is supported


@dataclass(frozen=True)
class CheckoutQuote:
    """Everything needed to place an order, priced against the live catalogue."""

    customer: Customer
    address: object
    cart: Cart
    lines: list
    pricing: OrderPricing
    coupon_code: str | None = None
    coupon: DiscountResult | None = None


def load_customer(customer_id):
    try:
        return current_domain.repository_for(Customer).get(customer_id)
    except ObjectNotFoundError:
        raise NotFound("Customer not found", field="customer_id") from None


def priced_lines(cart):
    """Re-resolve every active cart line against the catalogue and lock its price."""
    lines = []
    for item in cart.active_items:
        product = product_for_line(item)
        if product is None or not product.is_available:
            raise ProductUnavailable(f"{item.title} is no longer available", field="items")

        variant = product.variant_for(item.variant_sku)
        if variant is None:
            raise VariantNotFound(f"{item.title} ({item.variant_sku}) is no longer available", field="items")
        if variant.stock < item.quantity:
            raise InsufficientStock(
                f"Only {variant.stock} of {product.title} ({variant.sku}) left in stock",
                available=variant.stock,
                requested=item.quantity,
                field="items",
            )

        lines.append(
            {
                "product_id": str(product.id),
                "product_slug": product.slug,
                "variant_sku": variant.sku,
                "title": product.title,
                "size": variant.size,
                "color": variant.color,
                "image_url": product.primary_image(variant),
                "quantity": item.quantity,
                "unit_price": checkout_unit_price(product, variant),
            }
        )
    return lines


def _whole_rupees(amount) -> float:
    return float(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def price_order(subtotal, customer_id=None, coupon_code=None):
    """Shipping, tax, coupon discount and grand total for an order subtotal."""
    settings = get_settings()
    subtotal = round(subtotal, 2)
    shipping = 0.0 if subtotal >= settings.free_shipping_threshold else settings.flat_shipping_fee
    tax = _whole_rupees(subtotal * settings.tax_rate)

    coupon = None
    discount = 0.0
    if coupon_code:
        coupon = get_coupon_service().compute_discount(coupon_code, subtotal, str(customer_id))
        if coupon.applied:
            discount = coupon.discount + (shipping if coupon.free_shipping else 0.0)
        else:
            logger.info("Coupon not applied", coupon_code=coupon_code, reason=coupon.reason)

    pricing = OrderPricing(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        discount=round(discount, 2),
        grand_total=round(subtotal + shipping + tax - discount, 2),
        currency=settings.currency,
    )
    return pricing, coupon


def prepare_checkout(customer_id, shipping_address_id, coupon_code=None) -> CheckoutQuote:
    customer = load_customer(customer_id)
    address = customer.address_for(shipping_address_id)

    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    if cart is None or not cart.active_items:
        raise EmptyCart("Cart is empty")

    lines = priced_lines(cart)
    subtotal = sum(line["unit_price"] * line["quantity"] for line in lines)
    pricing, coupon = price_order(subtotal, customer_id=customer_id, coupon_code=coupon_code)

    return CheckoutQuote(
        customer=customer,
        address=address,
        cart=cart,
        lines=lines,
        pricing=pricing,
        coupon_code=coupon_code if coupon and coupon.applied else None,
        coupon=coupon,
    )


def place_order(quote, payment_method, customer_notes=None, transaction_id=None, gateway_intent_id=None):
    """Persist the order, decrement stock and empty the cart.

    With a ``transaction_id`` the order is placed with its payment already
    confirmed.
    """
    orders = current_domain.repository_for(Order)
    order_number = unique_order_number(orders.exists_with_number)

    order = Order.create(
        order_number=order_number,
        customer_id=str(quote.customer.id),
        items=quote.lines,
        pricing=quote.pricing,
        payment_method=payment_method,
        shipping_address=quote.address.to_snapshot(),
        customer={
            "name": quote.customer.full_name,
            "email": quote.customer.email,
            "phone": quote.customer.phone,
        },
        coupon_code=quote.coupon_code,
        customer_notes=customer_notes,
        gateway_intent_id=gateway_intent_id,
    )
    if transaction_id:
        order.confirm_payment(transaction_id, gateway_intent_id=gateway_intent_id)
    orders.add(order)

    current_domain.repository_for(Product).adjust_stock(
        [(product_id, sku, -quantity) for product_id, sku, quantity in order.stock_lines()]
    )

    quote.cart.clear(include_saved=True)
    current_domain.repository_for(Cart).add(quote.cart)

    if quote.coupon_code:
        get_coupon_service().record_redemption(
            quote.coupon_code, str(quote.customer.id), str(order.id), quote.pricing.discount
        )

    logger.info(
        "Order placed",
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(quote.customer.id),
        grand_total=order.pricing.grand_total,
        status=order.status,
    )
    return order


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        if command.items:
            raise FeatureNotImplemented("Placing orders from an explicit item list is not supported yet", field="items")

        quote = prepare_checkout(command.customer_id, command.shipping_address_id, command.coupon_code)
        order = place_order(quote, command.payment_method, customer_notes=command.customer_notes)
        return str(order.id)
