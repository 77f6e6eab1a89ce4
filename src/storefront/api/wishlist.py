"""FastAPI routes for the customer's wishlist."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import current_customer
from storefront.api.responses import success
from storefront.api.schemas import AddWishlistItemRequest, MoveToCartRequest, UpdateWishlistItemRequest
from storefront.api.serializers import cart_payload, wishlist_payload
from storefront.cart.cart import Cart
from storefront.shared.commands import dispatch
from storefront.wishlist.items import (
    AddWishlistItem,
    ClearWishlist,
    RemoveWishlistItem,
    UpdateWishlistItem,
)
from storefront.wishlist.sync import SyncWishlist, check_product, wishlist_summary
from storefront.wishlist.transfer import MoveWishlistItemToCart
from storefront.wishlist.wishlist import Wishlist

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


def _wishlist_data(customer_id):
    return wishlist_payload(current_domain.repository_for(Wishlist).get_or_create(customer_id))


@router.get("")
async def get_wishlist(customer_id: str = Depends(current_customer)):
    return success(_wishlist_data(customer_id))


@router.get("/summary")
async def get_wishlist_summary(customer_id: str = Depends(current_customer)):
    return success(wishlist_summary(customer_id))


@router.get("/check/{identifier}")
async def check_wishlist(identifier: str, customer_id: str = Depends(current_customer)):
    return success(check_product(customer_id, identifier))


@router.post("/items", status_code=201)
async def add_wishlist_item(body: AddWishlistItemRequest, customer_id: str = Depends(current_customer)):
    command = AddWishlistItem(
        customer_id=customer_id,
        product=body.product_id,
        variant_sku=body.variant_sku,
        priority=body.priority,
        notes=body.notes,
    )
    result = dispatch(command)
    message = "Item added to wishlist" if result["added"] else "Item already in wishlist"
    return success({**_wishlist_data(customer_id), "added": result["added"]}, message)


@router.put("/items/{item_id}")
async def update_wishlist_item(
    item_id: str,
    body: UpdateWishlistItemRequest,
    customer_id: str = Depends(current_customer),
):
    command = UpdateWishlistItem(
        customer_id=customer_id,
        item_id=item_id,
        priority=body.priority,
        notes=body.notes,
        variant_sku=body.variant_sku,
    )
    dispatch(command)
    return success(_wishlist_data(customer_id), "Wishlist item updated")


@router.delete("/items/{item_id}")
async def remove_wishlist_item(item_id: str, customer_id: str = Depends(current_customer)):
    dispatch(RemoveWishlistItem(customer_id=customer_id, item_id=item_id))
    return success(_wishlist_data(customer_id), "Item removed from wishlist")


@router.delete("")
async def clear_wishlist(customer_id: str = Depends(current_customer)):
    dispatch(ClearWishlist(customer_id=customer_id))
    return success(_wishlist_data(customer_id), "Wishlist cleared")


@router.post("/sync")
async def sync_wishlist(customer_id: str = Depends(current_customer)):
    dispatch(SyncWishlist(customer_id=customer_id))
    return success(_wishlist_data(customer_id), "Wishlist synced")


@router.post("/items/{item_id}/move-to-cart")
async def move_wishlist_item_to_cart(
    item_id: str,
    body: MoveToCartRequest | None = None,
    customer_id: str = Depends(current_customer),
):
    command = MoveWishlistItemToCart(
        customer_id=customer_id,
        item_id=item_id,
        quantity=body.quantity if body else 1,
    )
    dispatch(command)
    cart = current_domain.repository_for(Cart).get_or_create(customer_id)
    return success(
        {"wishlist": _wishlist_data(customer_id), "cart": cart_payload(cart)},
        "Item moved to cart",
    )
