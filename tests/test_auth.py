import mongomock
import pytest
from pymongo.errors import PyMongoError

import auth


def test_jwt_roundtrip_and_tamper():
    token = auth.jwt_encode({"sub": "abc"}, "secret")
    assert auth.jwt_decode(token, "secret")["sub"] == "abc"
    with pytest.raises(ValueError, match="signature"):
        auth.jwt_decode(token, "other")


def test_expired_token_rejected():
    token = auth.jwt_encode({"sub": "abc", "exp": 0}, "secret")
    with pytest.raises(ValueError, match="expired"):
        auth.jwt_decode(token, "secret")


def test_password_hashing():
    hashed = auth.hash_password("secret123")
    assert hashed != "secret123"
    assert auth.verify_password("secret123", hashed)
    assert not auth.verify_password("wrong", hashed)
    assert not auth.verify_password("secret123", "")


def test_register_creates_customer_profile(client, db):
    res = client.post("/api/auth/register", json={"email": "New@Yarnyantra.in", "password": "secret123", "full_name": "Meera"})
    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "new@yarnyantra.in"
    assert body["role"] == "customer"
    assert db["profile"].count_documents({"email": "new@yarnyantra.in"}) == 1


def test_register_duplicate_email(client):
    payload = {"email": "dup@yarnyantra.in", "password": "secret123"}
    assert client.post("/api/auth/register", json=payload).status_code == 201
    res = client.post("/api/auth/register", json=payload)
    assert res.status_code == 400
    assert res.json()["detail"] == "Email already in use"


def test_login_with_wrong_password(client):
    client.post("/api/auth/register", json={"email": "a@yarnyantra.in", "password": "secret123"})
    res = client.post("/api/auth/login", json={"email": "a@yarnyantra.in", "password": "nope"})
    assert res.status_code == 400


def test_session_accessor(client, signup):
    assert client.get("/api/auth/session").json() == {"user": None}
    headers = signup()
    user = client.get("/api/auth/session", headers=headers).json()["user"]
    assert user["full_name"] == "Asha Rao"
    assert "session_id" not in user


def test_logout_revokes_token(client, signup):
    headers = signup()
    assert client.get("/api/cart", headers=headers).status_code == 200
    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/cart", headers=headers).status_code == 401
    assert client.get("/api/auth/session", headers=headers).json() == {"user": None}


def test_protected_routes_need_a_session(client):
    assert client.get("/api/cart").status_code == 401
    assert client.get("/api/cart", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_nav_for_anonymous_customer_and_admin(client, signup, make_product):
    anon = client.get("/api/nav").json()
    assert anon["user"] is None and anon["cart_count"] == 0 and not anon["is_admin"]
    assert "/admin" not in [link["path"] for link in anon["links"]]

    customer = signup()
    product_id = make_product()
    client.post("/api/cart/items", json={"product_id": product_id, "quantity": 2}, headers=customer)
    client.post("/api/cart/items", json={"product_id": make_product(), "quantity": 3}, headers=customer)
    nav = client.get("/api/nav", headers=customer).json()
    assert nav["cart_count"] == 5
    assert not nav["is_admin"]
    assert "/admin" not in [link["path"] for link in nav["links"]]

    admin = signup(role="admin")
    nav = client.get("/api/nav", headers=admin).json()
    assert nav["is_admin"]
    assert "/admin" in [link["path"] for link in nav["links"]]


def test_failed_profile_write_removes_the_user(client, db, monkeypatch):
    real_insert_one = mongomock.collection.Collection.insert_one

    def failing_profile_insert(self, document, *args, **kwargs):
        if self.name == "profile":
            raise PyMongoError("write failed")
        return real_insert_one(self, document, *args, **kwargs)

    monkeypatch.setattr(mongomock.collection.Collection, "insert_one", failing_profile_insert)
    res = client.post("/api/auth/register", json={"email": "half@yarnyantra.in", "password": "secret123"})
    assert res.status_code == 500
    assert res.json()["detail"] == "Operation failed"
    assert db["user"].count_documents({}) == 0

    monkeypatch.undo()
    res = client.post("/api/auth/register", json={"email": "half@yarnyantra.in", "password": "secret123"})
    assert res.status_code == 201
