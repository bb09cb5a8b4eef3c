"""Integration tests for the product and cart endpoints."""

import pytest
from checkout.api.routes import cart_router, product_router
from checkout.catalogue.seed import MAIN_PRODUCT_ID
from fastapi import FastAPI
from fastapi.testclient import TestClient

SESSION = {"X-Session-Id": "sess-api-002"}


@pytest.fixture()
def client(catalogue):
    app = FastAPI()
    app.include_router(product_router)
    app.include_router(cart_router)
    return TestClient(app)


class TestProducts:
    def test_list_products(self, client):
        response = client.get("/api/products")
        assert response.status_code == 200
        ids = {p["id"] for p in response.json()}
        assert ids == {MAIN_PRODUCT_ID, "jade-facial-roller", "hydrating-face-serum"}

    def test_get_product(self, client):
        response = client.get(f"/api/products/{MAIN_PRODUCT_ID}")
        assert response.status_code == 200
        data = response.json()
        assert data["price"] == "34.99"
        assert data["original_price"] == "49.99"
        assert data["stock"] == 47
        assert "Ocean Blue" in data["colors"]

    def test_unknown_product(self, client):
        assert client.get("/api/products/nope").status_code == 404


class TestCart:
    def test_empty_cart(self, client):
        response = client.get("/api/cart", headers=SESSION)
        assert response.status_code == 200
        assert response.json() == []

    def test_missing_session(self, client):
        assert client.get("/api/cart").status_code == 400

    def test_session_cookie_is_accepted(self, client):
        client.cookies.set("session_id", "sess-cookie")
        client.post("/api/cart", json={"product_id": MAIN_PRODUCT_ID})
        response = client.get("/api/cart")
        assert len(response.json()) == 1

    def test_add_and_list(self, client):
        response = client.post(
            "/api/cart",
            json={"product_id": MAIN_PRODUCT_ID, "quantity": 2, "color": "Blush Pink"},
            headers=SESSION,
        )
        assert response.status_code == 200
        items = client.get("/api/cart", headers=SESSION).json()
        assert len(items) == 1
        assert items[0]["quantity"] == 2
        assert items[0]["color"] == "Blush Pink"
        assert items[0]["product"]["name"].startswith("CryoChill")

    def test_add_unknown_product(self, client):
        response = client.post("/api/cart", json={"product_id": "nope"}, headers=SESSION)
        assert response.status_code == 404

    def test_add_zero_quantity(self, client):
        response = client.post("/api/cart", json={"product_id": MAIN_PRODUCT_ID, "quantity": 0}, headers=SESSION)
        assert response.status_code == 422

    def test_update_quantity(self, client):
        item_id = client.post("/api/cart", json={"product_id": MAIN_PRODUCT_ID}, headers=SESSION).json()["item_id"]
        response = client.put(f"/api/cart/{item_id}", json={"quantity": 3}, headers=SESSION)
        assert response.status_code == 200
        assert client.get("/api/cart", headers=SESSION).json()[0]["quantity"] == 3

    def test_update_to_zero_removes(self, client):
        item_id = client.post("/api/cart", json={"product_id": MAIN_PRODUCT_ID}, headers=SESSION).json()["item_id"]
        response = client.put(f"/api/cart/{item_id}", json={"quantity": 0}, headers=SESSION)
        assert response.json()["status"] == "removed"
        assert client.get("/api/cart", headers=SESSION).json() == []

    def test_delete_item(self, client):
        item_id = client.post("/api/cart", json={"product_id": MAIN_PRODUCT_ID}, headers=SESSION).json()["item_id"]
        response = client.delete(f"/api/cart/{item_id}", headers=SESSION)
        assert response.status_code == 200
        assert client.get("/api/cart", headers=SESSION).json() == []

    def test_delete_unknown_item(self, client):
        client.post("/api/cart", json={"product_id": MAIN_PRODUCT_ID}, headers=SESSION)
        assert client.delete("/api/cart/nope", headers=SESSION).status_code == 404
