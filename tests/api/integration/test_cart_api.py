"""Integration tests for the cart endpoints."""

from factories import reload_product
from protean import current_domain

from storefront.catalogue.product import Product


def _add(client, headers, quantity=2, sku="CLS-M-WHT"):
    return client.post(
        "/cart/items",
        json={"product_id": "classic-linen-shirt", "variant_sku": sku, "quantity": quantity},
        headers=headers,
    )


class TestCartEndpoints:
    def test_empty_cart(self, client, headers):
        response = client.get("/cart", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["items"] == []
        assert body["data"]["totals"] == {"item_count": 0, "subtotal": 0.0, "saved_item_count": 0}

    def test_add_item(self, client, headers, shirt):
        response = _add(client, headers)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Item added to cart"
        item = body["data"]["items"][0]
        assert item["variant_sku"] == "CLS-M-WHT"
        assert item["line_total"] == 1000.0
        assert body["data"]["totals"]["subtotal"] == 1000.0

    def test_out_of_stock(self, client, headers, shirt):
        response = _add(client, headers, quantity=1, sku="CLS-L-WHT")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "insufficient_stock"

    def test_invalid_quantity(self, client, headers, shirt):
        response = _add(client, headers, quantity=0)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"
        assert response.json()["errors"][0]["field"] == "quantity"

    def test_unknown_product(self, client, headers):
        response = client.post(
            "/cart/items",
            json={"product_id": "ghost", "variant_sku": "GHOST-1", "quantity": 1},
            headers=headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_update_save_move_remove(self, client, headers, shirt):
        _add(client, headers)

        response = client.put("/cart/items/CLS-M-WHT", json={"quantity": 3}, headers=headers)
        assert response.json()["data"]["totals"]["item_count"] == 3

        response = client.post("/cart/items/CLS-M-WHT/save-for-later", headers=headers)
        assert response.json()["data"]["items"] == []
        assert len(response.json()["data"]["saved_items"]) == 1

        response = client.post("/cart/items/CLS-M-WHT/move-to-cart", headers=headers)
        assert response.json()["data"]["totals"]["item_count"] == 3

        response = client.delete("/cart/items/CLS-M-WHT", headers=headers)
        assert response.json()["data"]["items"] == []

    def test_summary_and_clear(self, client, headers, shirt):
        _add(client, headers)

        assert client.get("/cart/summary", headers=headers).json()["data"]["item_count"] == 2

        response = client.delete("/cart", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

    def test_get_refreshes_prices(self, client, headers, shirt):
        _add(client, headers)
        product = reload_product(shirt.id)
        product.change_variant_price("CLS-M-WHT", price=480.0)
        current_domain.repository_for(Product).add(product)

        response = client.get("/cart", headers=headers)

        assert response.json()["data"]["items"][0]["unit_price"] == 480.0

    def test_validate(self, client, headers, shirt):
        _add(client, headers)
        product = reload_product(shirt.id)
        product.change_variant_price("CLS-M-WHT", price=600.0)
        current_domain.repository_for(Product).add(product)

        first = client.post("/cart/validate", headers=headers).json()
        second = client.post("/cart/validate", headers=headers).json()

        assert first["data"]["valid"] is False
        assert first["message"] == "Cart has issues"
        assert second["data"]["valid"] is True
        assert second["message"] == "Cart is valid"


class TestAuthentication:
    def test_missing_customer_header(self, client):
        response = client.get("/cart")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Authentication required",
            "error": "unauthorized",
            "errors": [{"field": "x-customer-id", "message": "Authentication required"}],
        }
