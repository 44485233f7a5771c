# File: tests/test_app.py

"""
Application-level smoke tests: health check, error shape, startup seeding.
"""

import uvicorn

from storefront import main
from storefront.core.config import settings
from storefront.db.init_db import seed_initial_data
from storefront.db.repositories import UserRepository


def test_health_endpoint(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_malformed_body_uses_error_shape(client):
    resp = client.post("/api/v1/auth/login", content="not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert set(resp.json()) == {"message", "field"}


def test_seed_creates_single_admin(db):
    seed_initial_data(db)
    seed_initial_data(db)

    users = UserRepository(db)
    assert users.count() == 1
    admin = users.get_by_email(settings.first_admin_email)
    assert admin.is_admin
    assert admin.password_hash != settings.first_admin_password


def test_seeded_admin_can_log_in(client, db):
    seed_initial_data(db)
    resp = client.post(
        "/api/v1/auth/login",
        json={"email": settings.first_admin_email, "password": settings.first_admin_password},
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"


def test_run_serves_the_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("PORT", "9001")

    main.run()

    [(target, kwargs)] = calls
    assert target == "storefront.main:app"
    assert kwargs["port"] == 9001
