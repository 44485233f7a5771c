# File: tests/conftest.py

import os

# Must be set before anything from storefront is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"

import pytest
from fastapi.testclient import TestClient

from storefront.core.config import settings
from storefront.db.init_db import seed_initial_data
from storefront.db.session import SessionLocal, engine
from storefront.main import app
from storefront.models.base import Base
from storefront.models import order, user  # noqa: F401

API = settings.api_v1_prefix

SAMPLE_ITEM = {
    "id": "prod_002",
    "name": "Kytriq NebulaBook Pro",
    "category": "Laptops",
    "price": 100,
    "imageUrl": "https://images.example.com/nebulabook.jpg",
    "quantity": 2,
    # catalog-only fields the order does not keep
    "rating": 4.9,
    "reviewCount": 450,
}


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # Not used as a context manager: the lifespan (create tables + seed) stays off
    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def signup(client):
    def _signup(email="alice@example.com", password="password123", full_name="Alice Example"):
        return client.post(
            f"{API}/auth/signup",
            json={"fullName": full_name, "email": email, "password": password},
        )

    return _signup


@pytest.fixture
def alice(signup):
    body = signup().json()
    return {"id": body["user"]["id"], "token": body["token"]}


@pytest.fixture
def bob(signup):
    body = signup(email="bob@example.com", full_name="Bob Example").json()
    return {"id": body["user"]["id"], "token": body["token"]}


@pytest.fixture
def admin_token(client, db):
    seed_initial_data(db)
    resp = client.post(
        f"{API}/auth/login",
        json={"email": settings.first_admin_email, "password": settings.first_admin_password},
    )
    assert resp.status_code == 200
    return resp.json()["token"]


@pytest.fixture
def place_order(client, auth_headers):
    def _place(owner: dict, items=None, user_id=None):
        return client.post(
            f"{API}/orders",
            json={"userId": user_id or owner["id"], "items": items if items is not None else [SAMPLE_ITEM]},
            headers=auth_headers(owner["token"]),
        )

    return _place
