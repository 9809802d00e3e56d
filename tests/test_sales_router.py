"""
Tests for the sales endpoints.
"""
from fastapi.testclient import TestClient

from kasir.core.business_day import month_key, purchase_id_prefix, store_now
from kasir.core.config import get_settings


def create_pen(client: TestClient, headers: dict, stock: int = 10) -> dict:
    response = client.post("/api/items", json={"name": "Pen", "price": 5, "stock": stock}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def post_sale(client: TestClient, headers: dict, item_id: str, qty: int = 2, payment=20):
    return client.post(
        "/api/sales",
        json={"buyer": "Ani", "items": [{"id": item_id, "qty": qty}], "paymentAmount": payment},
        headers=headers,
    )


class TestCreateSale:
    """Tests for POST /api/sales."""

    def test_sale(self, client: TestClient, auth_headers: dict):
        pen = create_pen(client, auth_headers)

        response = post_sale(client, auth_headers, pen["id"])

        assert response.status_code == 201
        sale = response.json()
        today = store_now(get_settings().TIMEZONE).date()
        assert sale["id"] == f"{purchase_id_prefix(today)}001"
        assert sale["total"] == 10
        assert sale["change"] == 10
        assert sale["paymentAmount"] == 20
        assert sale["cashierUser"] == "tester"
        assert sale["lineItems"][0]["unitPriceAfterDiscount"] == 5
        assert client.get(f"/api/items/{pen['id']}", headers=auth_headers).json()["stock"] == 8

    def test_item_id_quantity_spelling(self, client: TestClient, auth_headers: dict):
        pen = create_pen(client, auth_headers)

        response = client.post(
            "/api/sales",
            json={"buyer": "Ani", "items": [{"itemId": pen["id"], "quantity": 1}], "paymentAmount": 5},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["lineItems"][0]["quantity"] == 1

    def test_insufficient_payment(self, client: TestClient, auth_headers: dict):
        pen = create_pen(client, auth_headers)

        response = post_sale(client, auth_headers, pen["id"], qty=2, payment=5)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "insufficient_payment"
        assert body["message"].startswith("Insufficient payment")
        assert client.get(f"/api/items/{pen['id']}", headers=auth_headers).json()["stock"] == 10

    def test_insufficient_stock(self, client: TestClient, auth_headers: dict):
        pen = create_pen(client, auth_headers, stock=1)

        response = post_sale(client, auth_headers, pen["id"], qty=2, payment=100)

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_stock"
        assert response.json()["details"] == {"item": "Pen", "requested": 2, "available": 1}

    def test_unknown_item(self, client: TestClient, auth_headers: dict):
        response = post_sale(client, auth_headers, "NOPE00")

        assert response.status_code == 404

    def test_missing_buyer(self, client: TestClient, auth_headers: dict):
        pen = create_pen(client, auth_headers)

        response = client.post(
            "/api/sales",
            json={"items": [{"id": pen["id"], "qty": 1}], "paymentAmount": 5},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestListSales:
    """Tests for GET /api/sales."""

    def test_list_current_month_and_get_by_id(self, client: TestClient, auth_headers: dict):
        pen = create_pen(client, auth_headers)
        first = post_sale(client, auth_headers, pen["id"]).json()
        second = post_sale(client, auth_headers, pen["id"]).json()

        listed = client.get("/api/sales", headers=auth_headers).json()
        fetched = client.get(f"/api/sales/{second['id']}", headers=auth_headers)

        assert [s["id"] for s in listed] == [first["id"], second["id"]]
        assert fetched.status_code == 200
        assert fetched.json() == second

    def test_list_by_month(self, client: TestClient, auth_headers: dict):
        pen = create_pen(client, auth_headers)
        post_sale(client, auth_headers, pen["id"])
        this_month = month_key(store_now(get_settings().TIMEZONE).date())

        assert len(client.get(f"/api/sales?month={this_month}", headers=auth_headers).json()) == 1
        assert client.get("/api/sales?month=1999-01", headers=auth_headers).json() == []

    def test_bad_month_is_400(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/sales?month=May-2024", headers=auth_headers)

        assert response.status_code == 400

    def test_unknown_sale_is_404(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/sales/010199001", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
