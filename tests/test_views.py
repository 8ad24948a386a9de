"""Tests for the admin HTTP surface."""
import io
import pytest
from PIL import Image as PILImage
import catalog_admin.extensions as ext
from catalog_admin.services import storage_service


def _headers(user_id):
    return {"X-User-Id": user_id}


def _png_bytes():
    buffer = io.BytesIO()
    PILImage.new("RGBA", (8, 8), (255, 0, 0, 128)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def uploads(monkeypatch):
    stored = {}

    def fake_upload(storage_key, data, content_type="image/jpeg"):
        stored[storage_key] = data

    monkeypatch.setattr(storage_service, "upload", fake_upload)
    return stored


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "db": "ok"}


def test_health_does_not_leak_internal_errors(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database password leaked")

    monkeypatch.setattr(ext.db.session, "execute", boom)

    resp = client.get("/health")
    assert resp.status_code == 503
    assert "password" not in str(resp.get_json()).lower()


def test_anonymous_is_forbidden(client):
    resp = client.get("/admin/products")
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "Forbidden."}


def test_customer_is_forbidden(client, roles):
    resp = client.get("/admin/products", headers=_headers("customer-1"))
    assert resp.status_code == 403


def test_create_and_fetch_product(client, roles, catalog):
    resp = client.post(
        "/admin/products",
        json={"name": "Red Shoe", "price": 20, "category_ids": [catalog.shoes.id]},
        headers=_headers("admin-1"),
    )
    assert resp.status_code == 201
    item = resp.get_json()["item"]
    assert item["slug"] == "red-shoe"

    resp = client.get(f"/admin/products/{item['id']}", headers=_headers("admin-1"))
    assert resp.status_code == 200
    assert resp.get_json()["item"]["categories"][0]["slug"] == "shoes"


def test_validation_error_shape(client, roles, catalog):
    resp = client.post(
        "/admin/products",
        json={"name": "Red Shoe", "price": 10, "discount_price": 20, "category_ids": [catalog.shoes.id]},
        headers=_headers("admin-1"),
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"]
    assert "discount_price" in body["validation"]["field_errors"]
    assert body["validation"]["issues"][0]["path"] == ["discount_price"]


def test_pydantic_errors_are_reported_per_field(client, roles):
    resp = client.post("/admin/products", json={"name": "X"}, headers=_headers("admin-1"))
    assert resp.status_code == 400
    field_errors = resp.get_json()["validation"]["field_errors"]
    assert {"name", "price"} <= set(field_errors)


def test_non_json_body(client, roles):
    resp = client.post(
        "/admin/products", data="nope", headers=_headers("admin-1"), content_type="text/plain"
    )
    assert resp.status_code == 400
    assert resp.get_json()["validation"]["form_errors"]


def test_patch_and_delete(client, roles, catalog):
    created = client.post(
        "/admin/products",
        json={"name": "Red Shoe", "price": 20, "category_ids": [catalog.shoes.id]},
        headers=_headers("vendor-1"),
    ).get_json()["item"]

    resp = client.patch(
        f"/admin/products/{created['id']}", json={"stock_quantity": 4}, headers=_headers("vendor-1")
    )
    assert resp.status_code == 200
    assert resp.get_json()["item"]["stock_quantity"] == 4

    resp = client.delete(f"/admin/products/{created['id']}", headers=_headers("vendor-2"))
    assert resp.status_code == 404

    resp = client.delete(f"/admin/products/{created['id']}", headers=_headers("vendor-1"))
    assert resp.get_json() == {"deleted": True}


def test_unknown_product_is_404(client, roles):
    resp = client.get("/admin/products/12345", headers=_headers("admin-1"))
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Product not found."


def test_list_products_clamps_page_size(client, roles, catalog):
    resp = client.get("/admin/products?per_page=500", headers=_headers("admin-1"))
    assert resp.status_code == 200
    assert resp.get_json()["total_count"] == 0


def test_category_request_endpoints(client, roles, catalog):
    resp = client.post(
        "/admin/categories/requests", json={"name": "Hats"}, headers=_headers("vendor-1")
    )
    assert resp.status_code == 201
    request_id = resp.get_json()["item"]["id"]

    resp = client.get("/admin/categories/requests", headers=_headers("vendor-1"))
    assert resp.get_json()["items"][0]["id"] == request_id

    resp = client.patch(
        "/admin/categories/requests",
        json={"requestId": request_id, "status": "approved"},
        headers=_headers("vendor-1"),
    )
    assert resp.status_code == 403

    resp = client.patch(
        "/admin/categories/requests",
        json={"requestId": request_id, "status": "approved"},
        headers=_headers("admin-1"),
    )
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True

    resp = client.patch(
        "/admin/categories/requests",
        json={"requestId": request_id, "status": "approved"},
        headers=_headers("admin-1"),
    )
    assert resp.status_code == 409


def test_taxonomy_endpoints(client, roles):
    resp = client.post("/admin/tags", json={"name": "Summer"}, headers=_headers("vendor-1"))
    assert resp.status_code == 201
    tag_id = resp.get_json()["item"]["id"]

    resp = client.patch(
        f"/admin/tags/{tag_id}", json={"name": "Summer 26"}, headers=_headers("vendor-1")
    )
    assert resp.get_json()["item"]["slug"] == "summer-26"

    resp = client.post("/admin/categories", json={"name": "Hats"}, headers=_headers("vendor-1"))
    assert resp.status_code == 403


def test_attribute_option_endpoint(client, session, roles):
    from catalog_admin.models import Attribute

    attribute = Attribute(name="Color", slug="color", created_by="vendor-1")
    session.add(attribute)
    session.commit()

    resp = client.post(
        f"/admin/attributes/{attribute.id}/options",
        json={"name": "Red"},
        headers=_headers("vendor-1"),
    )
    assert resp.status_code == 201
    assert resp.get_json()["item"]["created_by"] == "vendor-1"

    resp = client.get(f"/admin/attributes/{attribute.id}", headers=_headers("vendor-1"))
    assert [o["slug"] for o in resp.get_json()["item"]["options"]] == ["red"]


def test_media_upload(client, roles, uploads):
    resp = client.post(
        "/admin/media/upload",
        data={"file": (io.BytesIO(_png_bytes()), "red.png"), "alt_text": "Red swatch"},
        headers=_headers("vendor-1"),
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    item = resp.get_json()["item"]
    assert item["product_id"] is None
    assert item["alt_text"] == "Red swatch"
    assert item["url"].startswith("https://cdn.test/media/vendor-1/")
    (data,) = uploads.values()
    assert data[:3] == b"\xff\xd8\xff"  # re-encoded as JPEG


def test_media_upload_rejects_non_images(client, roles, uploads):
    resp = client.post(
        "/admin/media/upload",
        data={"file": (io.BytesIO(b"not an image"), "notes.txt")},
        headers=_headers("vendor-1"),
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "file" in resp.get_json()["validation"]["field_errors"]
    assert uploads == {}


def test_media_upload_requires_file(client, roles, uploads):
    resp = client.post("/admin/media/upload", data={}, headers=_headers("vendor-1"))
    assert resp.status_code == 400
