from datetime import timedelta

import pytest

import main
from database import create_document, now, to_object_id, update_document
from schemas import Order


ADMIN_ROUTES = [
    ("get", "/api/admin/dashboard"),
    ("get", "/api/admin/orders"),
    ("get", "/api/admin/blog"),
    ("post", "/api/admin/migrate-images"),
]


@pytest.mark.parametrize("method,path", ADMIN_ROUTES)
def test_non_admin_is_redirected_home(client, signup, method, path):
    res = getattr(client, method)(path, headers=signup(), follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"
    assert res.json()["detail"] == "Access denied. Admin privileges required."


def test_anonymous_admin_request_is_unauthorized(client):
    assert client.get("/api/admin/dashboard").status_code == 401


def _order(db, status, updated_at=None):
    order = Order(
        user_id="u1", order_number=f"ORD-{status}", total_amount=100, status=status,
        shipping_name="A", shipping_phone="1", shipping_address="Somewhere",
    )
    doc = {"updated_at": updated_at} if updated_at else {}
    return create_document(db, "order", {**order.model_dump(), **doc})


def test_dashboard_panels_and_metrics(client, signup, make_product, db):
    admin = signup(role="admin")
    make_product(name="Sold out", stock_quantity=0, sold_count=40)
    make_product(name="Few left", stock_quantity=3, sold_count=5)
    make_product(name="Plenty", stock_quantity=50, sold_count=9)
    _order(db, "pending")
    _order(db, "pending")
    _order(db, "shipped")
    _order(db, "shipped", updated_at=now() - timedelta(days=2))
    _order(db, "completed")

    body = client.get("/api/admin/dashboard", headers=admin).json()
    assert len(body["products"]) == 3
    assert [(p["name"], p["stock_label"]) for p in body["low_stock"]] == [("Sold out", "Sold Out"), ("Few left", "Low Stock")]
    assert [p["name"] for p in body["top_products"]] == ["Sold out", "Plenty", "Few left"]
    assert body["metrics"] == {"total_pending": 2, "shipped_today": 1}


def test_shipping_an_order_counts_for_today(client, signup, db):
    admin = signup(role="admin")
    order_id = _order(db, "pending")
    res = client.patch(f"/api/admin/orders/{order_id}", json={"status": "shipped"}, headers=admin)
    assert res.json()["status"] == "shipped"
    metrics = client.get("/api/admin/dashboard", headers=admin).json()["metrics"]
    assert metrics == {"total_pending": 0, "shipped_today": 1}
    assert client.patch(f"/api/admin/orders/{order_id}", json={"status": "lost"}, headers=admin).status_code == 422


def test_admin_orders_filter(client, signup, db):
    admin = signup(role="admin")
    _order(db, "pending")
    _order(db, "completed")
    orders = client.get("/api/admin/orders", params={"order_status": "completed"}, headers=admin).json()["orders"]
    assert [o["status"] for o in orders] == ["completed"]


def test_product_crud(client, signup):
    admin = signup(role="admin")
    payload = {"name": "Lion", "price": 950, "stock_quantity": 6, "category": "Accessories", "sku": "YY-LION"}
    created = client.post("/api/admin/products", json=payload, headers=admin)
    assert created.status_code == 201
    product = created.json()
    assert product["sold_count"] == 0

    assert client.post("/api/admin/products", json=payload, headers=admin).status_code == 409

    updated = client.put(f"/api/admin/products/{product['id']}", json={"price": 999}, headers=admin).json()
    assert updated["price"] == 999 and updated["name"] == "Lion"

    assert client.delete(f"/api/admin/products/{product['id']}", headers=admin).json() == {"success": True}
    assert client.delete(f"/api/admin/products/{product['id']}", headers=admin).status_code == 404
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_blog_crud_and_publishing(client, signup):
    admin = signup(role="admin")
    post = client.post("/api/admin/blog", json={"title": "New yarns", "content": "Fresh colours are in."}, headers=admin).json()
    assert post["published"] is False
    assert client.get("/api/blog").json()["posts"] == []
    assert client.get(f"/api/blog/{post['id']}").status_code == 404

    toggled = client.post(f"/api/admin/blog/{post['id']}/toggle", headers=admin).json()
    assert toggled["published"] is True and toggled["message"] == "Post published"
    assert [p["title"] for p in client.get("/api/blog").json()["posts"]] == ["New yarns"]

    client.put(f"/api/admin/blog/{post['id']}", json={"title": "Spring yarns"}, headers=admin)
    assert client.get(f"/api/blog/{post['id']}").json()["title"] == "Spring yarns"

    assert len(client.get("/api/admin/blog", headers=admin).json()["posts"]) == 1
    assert client.delete(f"/api/admin/blog/{post['id']}", headers=admin).json() == {"success": True}
    assert client.get("/api/blog").json()["posts"] == []


def test_toggle_of_a_post_deleted_midway_is_not_found(client, signup, monkeypatch):
    admin = signup(role="admin")
    post_id = client.post("/api/admin/blog", json={"title": "Gone soon", "content": "..."}, headers=admin).json()["id"]

    def delete_then_update(database, collection_name, doc_id, fields):
        database[collection_name].delete_one({"_id": to_object_id(doc_id)})
        return update_document(database, collection_name, doc_id, fields)

    monkeypatch.setattr(main, "update_document", delete_then_update)
    res = client.post(f"/api/admin/blog/{post_id}/toggle", headers=admin)
    assert res.status_code == 404
    assert res.json()["detail"] == "Post not found"
