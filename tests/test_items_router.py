"""
Tests for the items and stock endpoints.
"""
from pathlib import Path

from fastapi.testclient import TestClient

from kasir.core.config import get_settings
from kasir.core.errors import NotFoundError
from kasir.services.inventory import InventoryService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def create_item(client: TestClient, headers: dict, **fields) -> dict:
    payload = {"name": "Pen", "price": 5, "stock": 10}
    payload.update(fields)
    response = client.post("/api/items", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateOrRestock:
    """Tests for POST /api/items."""

    def test_create(self, client: TestClient, auth_headers: dict):
        item = create_item(client, auth_headers, category="Stationery")

        assert len(item["id"]) == 6
        assert item["name"] == "Pen"
        assert item["price"] == 5
        assert item["discount"] == 0
        assert item["stock"] == 10
        assert item["category"] == "Stationery"
        assert item["photoRef"] is None

    def test_same_name_restocks(self, client: TestClient, auth_headers: dict):
        item = create_item(client, auth_headers)

        response = client.post("/api/items", json={"name": " PEN ", "stock": 5}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == item["id"]
        assert response.json()["stock"] == 15
        assert len(client.get("/api/items", headers=auth_headers).json()) == 1

    def test_new_item_without_price(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/items", json={"name": "Pen", "stock": 5}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_malformed_body_is_400(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/items", json={"name": "Pen", "price": -1}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_negative_restock_is_400(self, client: TestClient, auth_headers: dict):
        create_item(client, auth_headers)

        response = client.post("/api/items", json={"name": "Pen", "stock": -3}, headers=auth_headers)

        assert response.status_code == 400


class TestUpdateAndDelete:
    """Tests for PUT and DELETE /api/items/{id}."""

    def test_update_fields(self, client: TestClient, auth_headers: dict):
        item = create_item(client, auth_headers)

        response = client.put(
            f"/api/items/{item['id']}",
            json={"price": 6.5, "discount": 10, "name": ""},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["price"] == 6.5
        assert data["discount"] == 10
        assert data["name"] == "Pen"

    def test_rename_conflict_is_409(self, client: TestClient, auth_headers: dict):
        create_item(client, auth_headers, name="Widget")
        gadget = create_item(client, auth_headers, name="Gadget")

        response = client.put(f"/api/items/{gadget['id']}", json={"name": "widget "}, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_update_unknown_item_is_404(self, client: TestClient, auth_headers: dict):
        response = client.put("/api/items/NOPE00", json={"stock": 1}, headers=auth_headers)

        assert response.status_code == 404

    def test_delete(self, client: TestClient, auth_headers: dict):
        item = create_item(client, auth_headers)

        response = client.delete(f"/api/items/{item['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Item deleted successfully"}
        assert client.get(f"/api/items/{item['id']}", headers=auth_headers).status_code == 404

    def test_delete_sold_item_keeps_sale_snapshot(self, client: TestClient, auth_headers: dict):
        item = create_item(client, auth_headers)
        sale = client.post(
            "/api/sales",
            json={"buyer": "Ani", "items": [{"id": item["id"], "qty": 1}], "paymentAmount": 5},
            headers=auth_headers,
        ).json()

        client.delete(f"/api/items/{item['id']}", headers=auth_headers)

        stored = client.get(f"/api/sales/{sale['id']}", headers=auth_headers).json()
        assert stored["lineItems"][0]["name"] == "Pen"


class TestPhotoUpload:
    """Tests for POST /api/items/{id}/photo."""

    def test_upload_sets_photo_ref(self, client: TestClient, auth_headers: dict):
        item = create_item(client, auth_headers)

        response = client.post(
            f"/api/items/{item['id']}/photo",
            files={"photo": ("pen.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        photo_ref = response.json()["photoRef"]
        assert photo_ref.startswith("/uploads/") and photo_ref.endswith(".png")
        stored = Path(get_settings().UPLOAD_DIR) / photo_ref.rsplit("/", 1)[-1]
        assert stored.read_bytes() == PNG_BYTES
        assert client.get(photo_ref).content == PNG_BYTES

    def test_non_image_is_rejected(self, client: TestClient, auth_headers: dict):
        item = create_item(client, auth_headers)

        response = client.post(
            f"/api/items/{item['id']}/photo",
            files={"photo": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_unknown_item(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/items/NOPE00/photo",
            files={"photo": ("pen.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 404

    def test_failed_attach_removes_the_saved_file(self, client: TestClient, auth_headers: dict, monkeypatch):
        item = create_item(client, auth_headers)
        upload_dir = Path(get_settings().UPLOAD_DIR)
        upload_dir.mkdir(parents=True, exist_ok=True)
        before = set(upload_dir.iterdir())

        def deleted_meanwhile(self, item_id, photo_ref, user):
            raise NotFoundError(f"Item {item_id} not found", {"id": item_id})

        monkeypatch.setattr(InventoryService, "attach_photo", deleted_meanwhile)
        response = client.post(
            f"/api/items/{item['id']}/photo",
            files={"photo": ("pen.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert set(upload_dir.iterdir()) == before


class TestStock:
    """Tests for the stock views."""

    def test_lowest_stock_first(self, client: TestClient, auth_headers: dict):
        create_item(client, auth_headers, name="Pen", stock=10)
        create_item(client, auth_headers, name="Ink", stock=2, category="supplies")
        create_item(client, auth_headers, name="Tape", stock=5, category="Supplies")

        everything = client.get("/api/stock", headers=auth_headers).json()
        supplies = client.get("/api/stock/category/SUPPLIES", headers=auth_headers).json()

        assert [i["name"] for i in everything] == ["Ink", "Tape", "Pen"]
        assert [i["name"] for i in supplies] == ["Ink", "Tape"]
