import mongomock
import pytest
from fastapi.testclient import TestClient

import main
from database import create_document, ensure_indexes, get_db, to_object_id
from schemas import Product


@pytest.fixture
def db():
    database = mongomock.MongoClient()["storefront_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    main.app.dependency_overrides[get_db] = lambda: db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def signup(client, db):
    """Registers and signs in a user, returning auth headers (role optional)"""
    counter = {"n": 0}

    def _signup(role="customer", full_name="Asha Rao", **profile):
        counter["n"] += 1
        email = f"user{counter['n']}@yarnyantra.in"
        res = client.post("/api/auth/register", json={"email": email, "password": "secret123", "full_name": full_name})
        assert res.status_code == 201
        user_id = res.json()["id"]
        fields = dict(profile)
        if role != "customer":
            fields["role"] = role
        if fields:
            db["profile"].update_one({"_id": to_object_id(user_id)}, {"$set": fields})
        token = client.post("/api/auth/login", json={"email": email, "password": "secret123"}).json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _signup


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        data = {
            "name": f"Product {counter['n']}",
            "price": 500,
            "stock_quantity": 10,
            "category": "Accessories",
            "sku": f"SKU-{counter['n']}",
        }
        data.update(fields)
        return create_document(db, "product", Product(**data))

    return _make


@pytest.fixture
def shipping():
    return {
        "name": "Asha Rao",
        "phone": "9876543210",
        "address_line_1": "12 MG Road",
        "address_line_2": "",
        "city": "Bengaluru",
        "state": "Karnataka",
        "zip_code": "560001",
    }
