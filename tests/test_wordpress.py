# tests/test_wordpress.py

"""
WordPress bridge: origin allow-list, bearer tokens and order intake.
"""

from fastapi.testclient import TestClient


ALLOWED = {"Origin": "https://shop.example.com"}


def test_disallowed_origin_rejected(client: TestClient, customer):
    response = client.post(
        "/wordpress/auth",
        json={"action": "login", "email": customer.email, "password": "Password123"},
        headers={"Origin": "https://evil.example.net"},
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "CORS not allowed"


def test_bridge_login_returns_token(client: TestClient, customer):
    response = client.post(
        "/wordpress/auth",
        json={"action": "login", "email": customer.email, "password": "Password123"},
        headers=ALLOWED,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["id"] == customer.id

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.json()["scheme"] == "bridge"


def test_bridge_login_bad_password(client: TestClient, customer):
    response = client.post(
        "/wordpress/auth",
        json={"action": "login", "email": customer.email, "password": "Nope12345"},
        headers=ALLOWED,
    )
    assert response.status_code == 401


def test_bridge_register_creates_customer(client: TestClient):
    response = client.post(
        "/wordpress/auth",
        json={"action": "register", "email": "wp.buyer@example.com", "password": "Secret123"},
        headers=ALLOWED,
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["role"] == "CUSTOMER"
    assert user["name"] == "wp.buyer"


def test_bridge_register_duplicate(client: TestClient, customer):
    response = client.post(
        "/wordpress/auth",
        json={"action": "register", "email": customer.email, "password": "Secret123"},
        headers=ALLOWED,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_bridge_unknown_action(client: TestClient, customer):
    response = client.post(
        "/wordpress/auth",
        json={"action": "reset", "email": customer.email, "password": "Password123"},
        headers=ALLOWED,
    )
    assert response.status_code == 400


def test_bridge_orders_need_bearer(client: TestClient, customer, session_cookie):
    for name, value in session_cookie(customer).items():
        client.cookies.set(name, value)

    assert client.get("/wordpress/orders").status_code == 401


def test_bridge_order_roundtrip(client: TestClient, customer, auth_headers):
    created = client.post(
        "/wordpress/orders",
        json={"customer_name": "WP Buyer", "customer_email": "wp@example.com", "total_price": "12.5"},
        headers=auth_headers(customer),
    )
    assert created.status_code == 200
    assert created.json()["order"]["order_number"] == "MQ_1001"

    listed = client.get("/wordpress/orders", headers=auth_headers(customer))
    assert [o["id"] for o in listed.json()["orders"]] == [created.json()["order"]["id"]]
