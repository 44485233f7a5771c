# File: tests/test_orders.py

from datetime import timedelta

from storefront.core.config import settings
from storefront.core.security import create_access_token, decode_access_token

API = "/api/v1"


def test_create_order_prices_and_snapshots_items(place_order, alice):
    resp = place_order(alice)
    assert resp.status_code == 201

    order = resp.json()
    assert order["id"].startswith("KYT-")
    assert order["userId"] == alice["id"]
    assert order["customerName"] == "Alice Example"
    assert order["status"] == "Processing"
    assert order["subtotal"] == 200.0
    assert order["shipping"] == 5.0
    assert order["taxes"] == 16.0
    assert order["total"] == 221.0
    assert "date" in order

    [item] = order["items"]
    assert item == {
        "id": "prod_002",
        "name": "Kytriq NebulaBook Pro",
        "category": "Laptops",
        "price": 100.0,
        "imageUrl": "https://images.example.com/nebulabook.jpg",
        "quantity": 2,
    }


def test_free_order_pays_no_shipping(place_order, alice):
    freebie = {"id": "prod_free", "name": "Sticker", "category": "Accessories", "price": 0, "quantity": 3}
    resp = place_order(alice, items=[freebie])
    assert resp.status_code == 201
    assert resp.json()["shipping"] == 0
    assert resp.json()["total"] == 0


def test_create_order_requires_token(client):
    resp = client.post(f"{API}/orders", json={"userId": "user_x", "items": []})
    assert resp.status_code == 401


def test_create_order_rejects_empty_items(place_order, alice):
    resp = place_order(alice, items=[])
    assert resp.status_code == 400
    assert resp.json()["field"] == "items"


def test_create_order_rejects_bad_quantity(place_order, alice):
    item = {"id": "prod_1", "name": "Cable", "price": 5, "quantity": 0}
    resp = place_order(alice, items=[item])
    assert resp.status_code == 400
    assert resp.json()["field"] == "items"


def test_create_order_rejects_out_of_range_price(place_order, alice):
    item = {"id": "prod_1", "name": "Cable", "price": 1e30, "quantity": 1}
    resp = place_order(alice, items=[item])
    assert resp.status_code == 400
    assert resp.json()["field"] == "items"


def test_create_order_rejects_non_finite_price(client, alice, auth_headers):
    for literal in ("Infinity", "NaN"):
        body = (
            '{"userId": "%s", "items": [{"id": "prod_1", "name": "Cable", "price": %s, "quantity": 1}]}'
            % (alice["id"], literal)
        )
        resp = client.post(
            f"{API}/orders",
            content=body,
            headers={**auth_headers(alice["token"]), "Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["field"] == "items"


def test_create_order_rejects_huge_quantity(place_order, alice):
    item = {"id": "prod_1", "name": "Cable", "price": 5, "quantity": 10**30}
    resp = place_order(alice, items=[item])
    assert resp.status_code == 400
    assert resp.json()["field"] == "items"


def test_create_order_missing_user_id(client, alice, auth_headers):
    resp = client.post(f"{API}/orders", json={"items": []}, headers=auth_headers(alice["token"]))
    assert resp.status_code == 400
    assert resp.json()["field"] == "userId"


def test_cannot_order_on_behalf_of_someone_else(place_order, alice, bob):
    resp = place_order(bob, user_id=alice["id"])
    assert resp.status_code == 403


def test_order_for_deleted_owner_is_not_found(client, place_order, alice, admin_token, auth_headers):
    client.delete(f"{API}/users/{alice['id']}", headers=auth_headers(admin_token))

    resp = place_order(alice)
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


def test_customer_cannot_list_orders_but_admin_can(client, signup, admin_token, auth_headers, place_order):
    body = signup().json()
    alice = {"id": body["user"]["id"], "token": body["token"]}
    assert decode_access_token(alice["token"]).role == "customer"

    resp = client.get(f"{API}/orders", headers=auth_headers(alice["token"]))
    assert resp.status_code == 403

    first = place_order(alice).json()
    second = place_order(alice).json()

    resp = client.get(f"{API}/orders", headers=auth_headers(admin_token))
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()] == [second["id"], first["id"]]


def test_list_own_orders(client, place_order, alice, bob, auth_headers):
    mine = place_order(alice).json()
    place_order(bob)

    resp = client.get(f"{API}/orders/mine", headers=auth_headers(alice["token"]))
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()] == [mine["id"]]


def test_update_status_is_idempotent(client, place_order, alice, admin_token, auth_headers):
    order_id = place_order(alice).json()["id"]
    url = f"{API}/orders/{order_id}/status"

    for _ in range(2):
        resp = client.put(url, json={"status": "Shipped"}, headers=auth_headers(admin_token))
        assert resp.status_code == 200
        assert resp.json()["status"] == "Shipped"
        assert resp.json()["total"] == 221.0

    orders = client.get(f"{API}/orders", headers=auth_headers(admin_token)).json()
    assert len(orders) == 1


def test_status_machine_is_permissive_by_default(client, place_order, alice, admin_token, auth_headers):
    order_id = place_order(alice).json()["id"]
    url = f"{API}/orders/{order_id}/status"
    headers = auth_headers(admin_token)

    for status in ("Delivered", "Processing", "Cancelled", "Shipped"):
        resp = client.put(url, json={"status": status}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == status


def test_strict_status_machine_keeps_final_states(client, place_order, alice, admin_token, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "strict_status_transitions", True)
    order_id = place_order(alice).json()["id"]
    url = f"{API}/orders/{order_id}/status"
    headers = auth_headers(admin_token)

    assert client.put(url, json={"status": "Delivered"}, headers=headers).status_code == 200
    assert client.put(url, json={"status": "Delivered"}, headers=headers).status_code == 200

    resp = client.put(url, json={"status": "Processing"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["field"] == "status"


def test_update_status_unknown_order(client, admin_token, auth_headers):
    resp = client.put(f"{API}/orders/KYT-0/status", json={"status": "Shipped"}, headers=auth_headers(admin_token))
    assert resp.status_code == 404


def test_update_status_rejects_unknown_value(client, place_order, alice, admin_token, auth_headers):
    order_id = place_order(alice).json()["id"]
    resp = client.put(
        f"{API}/orders/{order_id}/status",
        json={"status": "Teleported"},
        headers=auth_headers(admin_token),
    )
    assert resp.status_code == 400
    assert resp.json()["field"] == "status"


def test_customer_cannot_update_status(client, place_order, alice, auth_headers):
    order_id = place_order(alice).json()["id"]
    resp = client.put(
        f"{API}/orders/{order_id}/status",
        json={"status": "Delivered"},
        headers=auth_headers(alice["token"]),
    )
    assert resp.status_code == 403


def test_get_order_read_access_is_loose_by_default(client, place_order, alice, bob, auth_headers):
    order_id = place_order(alice).json()["id"]

    resp = client.get(f"{API}/orders/{order_id}", headers=auth_headers(bob["token"]))
    assert resp.status_code == 200
    assert resp.json()["id"] == order_id


def test_get_order_ownership_enforced_when_enabled(
    client, place_order, alice, bob, admin_token, auth_headers, monkeypatch
):
    monkeypatch.setattr(settings, "enforce_order_ownership", True)
    order_id = place_order(alice).json()["id"]

    assert client.get(f"{API}/orders/{order_id}", headers=auth_headers(bob["token"])).status_code == 403
    assert client.get(f"{API}/orders/{order_id}", headers=auth_headers(alice["token"])).status_code == 200
    assert client.get(f"{API}/orders/{order_id}", headers=auth_headers(admin_token)).status_code == 200


def test_get_unknown_order(client, alice, auth_headers):
    resp = client.get(f"{API}/orders/KYT-missing", headers=auth_headers(alice["token"]))
    assert resp.status_code == 404


def test_expired_token_is_an_authentication_failure(client, alice, auth_headers):
    expired = create_access_token(
        subject=alice["id"],
        email="alice@example.com",
        role="customer",
        expires_delta=timedelta(minutes=-5),
    )
    resp = client.get(f"{API}/orders/mine", headers=auth_headers(expired))
    assert resp.status_code == 401
    assert resp.json()["message"] == "Could not validate credentials"


def test_forged_admin_role_is_rejected(client, alice, auth_headers):
    header, payload, signature = alice["token"].split(".")
    forged = create_access_token(subject=alice["id"], email="alice@example.com", role="admin").split(".")[1]

    resp = client.get(f"{API}/orders", headers=auth_headers(f"{header}.{forged}.{signature}"))
    assert resp.status_code == 401
