"""Storefront FastAPI application.

Processes commands synchronously per HTTP request inside the storefront
domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront
from storefront.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()

# Initialized at module level so uvicorn workers share it.
storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Carts, wishlists, orders, returns and payments",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and bind request log context."""
    bind_request_context(request_id=request.headers.get("x-request-id") or uuid4().hex, path=request.url.path)
    try:
        with storefront.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api.addresses import router as address_router  # noqa: E402
from storefront.api.cart import router as cart_router  # noqa: E402
from storefront.api.errors import register_exception_handlers  # noqa: E402
from storefront.api.orders import router as order_router  # noqa: E402
from storefront.api.payments import router as payment_router  # noqa: E402
from storefront.api.profile import router as profile_router  # noqa: E402
from storefront.api.wishlist import router as wishlist_router  # noqa: E402

register_exception_handlers(app)
app.include_router(cart_router)
app.include_router(wishlist_router)
app.include_router(order_router)
app.include_router(address_router)
app.include_router(payment_router)
app.include_router(profile_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
