"""FastAPI routes for the customer's cart."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import current_customer
from storefront.api.responses import success
from storefront.api.schemas import AddCartItemRequest, UpdateCartItemRequest
from storefront.api.serializers import cart_payload
from storefront.cart.cart import Cart
from storefront.cart.items import (
    AddCartItem,
    MoveCartItemToCart,
    RemoveCartItem,
    SaveCartItemForLater,
    UpdateCartItemQuantity,
)
from storefront.cart.management import ClearCart, RefreshCart, ValidateCart, cart_summary
from storefront.shared.commands import dispatch

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_data(customer_id):
    return cart_payload(current_domain.repository_for(Cart).get_or_create(customer_id))


@router.get("")
async def get_cart(customer_id: str = Depends(current_customer)):
    """The customer's cart, refreshed against the live catalogue."""
    dispatch(RefreshCart(customer_id=customer_id))
    return success(_cart_data(customer_id))


@router.get("/summary")
async def get_cart_summary(customer_id: str = Depends(current_customer)):
    return success(cart_summary(customer_id))


@router.post("/items", status_code=201)
async def add_cart_item(body: AddCartItemRequest, customer_id: str = Depends(current_customer)):
    command = AddCartItem(
        customer_id=customer_id,
        product=body.product_id,
        variant_sku=body.variant_sku,
        quantity=body.quantity,
    )
    dispatch(command)
    return success(_cart_data(customer_id), "Item added to cart")


@router.put("/items/{identifier}")
async def update_cart_item(
    identifier: str,
    body: UpdateCartItemRequest,
    customer_id: str = Depends(current_customer),
):
    command = UpdateCartItemQuantity(customer_id=customer_id, item=identifier, quantity=body.quantity)
    dispatch(command)
    return success(_cart_data(customer_id), "Cart updated")


@router.delete("/items/{identifier}")
async def remove_cart_item(identifier: str, customer_id: str = Depends(current_customer)):
    dispatch(RemoveCartItem(customer_id=customer_id, item=identifier))
    return success(_cart_data(customer_id), "Item removed from cart")


@router.post("/items/{identifier}/save-for-later")
async def save_item_for_later(identifier: str, customer_id: str = Depends(current_customer)):
    dispatch(SaveCartItemForLater(customer_id=customer_id, item=identifier))
    return success(_cart_data(customer_id), "Item saved for later")


@router.post("/items/{identifier}/move-to-cart")
async def move_item_to_cart(identifier: str, customer_id: str = Depends(current_customer)):
    dispatch(MoveCartItemToCart(customer_id=customer_id, item=identifier))
    return success(_cart_data(customer_id), "Item moved to cart")


@router.delete("")
async def clear_cart(customer_id: str = Depends(current_customer)):
    dispatch(ClearCart(customer_id=customer_id))
    return success(_cart_data(customer_id), "Cart cleared")


@router.post("/validate")
async def validate_cart(customer_id: str = Depends(current_customer)):
    result = dispatch(ValidateCart(customer_id=customer_id))
    message = "Cart is valid" if result["valid"] else "Cart has issues"
    return success(result, message)
