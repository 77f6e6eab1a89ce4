"""FastAPI routes for online payment checkout."""

from fastapi import APIRouter, Depends, Header, Request

from storefront.api.deps import current_customer
from storefront.api.responses import success
from storefront.api.schemas import CreatePaymentIntentRequest, VerifyPaymentRequest
from storefront.api.serializers import order_payload
from storefront.order.lifecycle import load_order
from storefront.payments.checkout import CreatePaymentIntent, ProcessGatewayWebhook, VerifyPayment
from storefront.shared.commands import dispatch

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/intents", status_code=201)
async def create_payment_intent(body: CreatePaymentIntentRequest, customer_id: str = Depends(current_customer)):
    command = CreatePaymentIntent(
        customer_id=customer_id,
        shipping_address_id=body.shipping_address_id,
        payment_method=body.payment_method,
        coupon_code=body.coupon_code,
        customer_notes=body.customer_notes,
    )
    intent = dispatch(command)
    return success(intent, "Payment initiated")


@router.post("/verify")
async def verify_payment(body: VerifyPaymentRequest, customer_id: str = Depends(current_customer)):
    command = VerifyPayment(
        customer_id=customer_id,
        intent_id=body.intent_id,
        transaction_id=body.transaction_id,
        signature=body.signature,
    )
    order_id = dispatch(command)
    return success(order_payload(load_order(order_id)), "Payment verified and order placed")


@router.post("/webhook")
async def gateway_webhook(request: Request, x_gateway_signature: str = Header(default="")):
    """Gateway callback. Authenticated by signature, not by customer headers."""
    body = (await request.body()).decode("utf-8")
    command = ProcessGatewayWebhook(body=body, signature=x_gateway_signature)
    result = dispatch(command)
    return success(result, "Webhook processed")
