"""FastAPI routes for orders: checkout, history, cancellation, returns and admin operations."""

import json

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import current_admin, current_customer
from storefront.api.responses import success
from storefront.api.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    RequestReturnRequest,
    UpdateOrderStatusRequest,
    UpdateReturnRequestRequest,
)
from storefront.api.serializers import order_payload, order_stats_payload, order_summary_payload
from storefront.order.lifecycle import CancelOrder, RefundOrder, UpdateOrderStatus, load_order
from storefront.order.placement import PlaceOrder
from storefront.order.queries import get_order, list_all_orders, list_orders, order_stats
from storefront.order.returns import CancelReturnRequest, RequestReturn, UpdateReturnRequest
from storefront.shared.commands import dispatch

router = APIRouter(prefix="/orders", tags=["orders"])


def _page(result):
    return {
        "orders": [order_summary_payload(o) for o in result["orders"]],
        "pagination": result["pagination"],
    }


@router.post("", status_code=201)
async def create_order(body: CreateOrderRequest, customer_id: str = Depends(current_customer)):
    command = PlaceOrder(
        customer_id=customer_id,
        shipping_address_id=body.shipping_address_id,
        payment_method=body.payment_method,
        coupon_code=body.coupon_code,
        customer_notes=body.customer_notes,
        items=json.dumps([i.model_dump() for i in body.items]) if body.items else None,
    )
    order_id = dispatch(command)
    return success(order_payload(load_order(order_id)), "Order placed successfully")


@router.get("")
async def get_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    customer_id: str = Depends(current_customer),
):
    return success(_page(list_orders(customer_id, status=status, page=page, limit=limit)))


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
@router.get("/admin/all")
async def get_all_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    admin_id: str = Depends(current_admin),
):
    return success(_page(list_all_orders(status=status, page=page, limit=limit)))


@router.patch("/admin/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    admin_id: str = Depends(current_admin),
):
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        courier=body.courier,
        note=body.note,
    )
    dispatch(command)
    return success(order_payload(load_order(order_id)), "Order status updated")


@router.patch("/admin/{order_id}/return")
async def update_return_request(
    order_id: str,
    body: UpdateReturnRequestRequest,
    admin_id: str = Depends(current_admin),
):
    command = UpdateReturnRequest(
        order_id=order_id,
        status=body.status,
        admin_notes=body.admin_notes,
        resolution=body.resolution,
        refund_amount=body.refund_amount,
        processed_by=body.processed_by or admin_id,
    )
    dispatch(command)
    return success(order_payload(load_order(order_id)), "Return request updated")


@router.post("/admin/{order_id}/refund")
async def refund_order(order_id: str, admin_id: str = Depends(current_admin)):
    dispatch(RefundOrder(order_id=order_id))
    return success(order_payload(load_order(order_id)), "Order refunded")


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------
@router.get("/stats")
async def get_order_stats(customer_id: str = Depends(current_customer)):
    return success(order_stats_payload(order_stats(customer_id)))


@router.get("/{identifier}")
async def get_order_detail(identifier: str, customer_id: str = Depends(current_customer)):
    return success(order_payload(get_order(customer_id, identifier)))


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    customer_id: str = Depends(current_customer),
):
    command = CancelOrder(order_id=order_id, customer_id=customer_id, reason=body.reason if body else None)
    dispatch(command)
    return success(order_payload(load_order(order_id)), "Order cancelled")


@router.post("/{order_id}/return", status_code=201)
async def request_return(
    order_id: str,
    body: RequestReturnRequest,
    customer_id: str = Depends(current_customer),
):
    command = RequestReturn(
        order_id=order_id,
        customer_id=customer_id,
        items=json.dumps([i.model_dump() for i in body.items]),
        reason=body.reason,
        customer_notes=body.customer_notes,
        evidence=json.dumps(body.evidence),
    )
    dispatch(command)
    return success(order_payload(load_order(order_id)), "Return request submitted")


@router.post("/{order_id}/return/cancel")
async def cancel_return_request(order_id: str, customer_id: str = Depends(current_customer)):
    dispatch(CancelReturnRequest(order_id=order_id, customer_id=customer_id))
    return success(order_payload(load_order(order_id)), "Return request cancelled")
