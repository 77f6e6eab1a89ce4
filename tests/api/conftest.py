import pytest
from factories import save_customer, save_product
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api.addresses import router as address_router
from storefront.api.cart import router as cart_router
from storefront.api.errors import register_exception_handlers
from storefront.api.orders import router as order_router
from storefront.api.payments import router as payment_router
from storefront.api.profile import router as profile_router
from storefront.api.wishlist import router as wishlist_router


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    for router in (cart_router, wishlist_router, order_router, address_router, payment_router, profile_router):
        app.include_router(router)
    return TestClient(app)


@pytest.fixture()
def customer():
    return save_customer()


@pytest.fixture()
def headers(customer):
    return {"X-Customer-Id": str(customer.id)}


@pytest.fixture()
def admin_headers(customer):
    return {"X-Customer-Id": str(customer.id), "X-Admin": "true"}


@pytest.fixture()
def shirt():
    return save_product(variants=(("CLS-M-WHT", "M", "White", 500.0, 10), ("CLS-L-WHT", "L", "White", 520.0, 0)))
