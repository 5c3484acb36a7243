# tests/test_orders.py

"""
Order intake, visibility and soft deletion of order files.
"""

from datetime import datetime

from fastapi.testclient import TestClient
from sqlmodel import select

from models.file_purge import FilePurge
from models.order import Order
from models.user import User


ORDER = {
    "customer_name": "Jane Doe",
    "customer_email": "Jane@Example.com",
    "paper_size": "a3",
    "color_type": "full color",
    "binding_type": "spiral-bound",
    "copies": "0",
    "pages": "12",
    "total_price": "45.00",
    "delivery_type": "courier",
}


def place_order(client, headers, **overrides):
    response = client.post("/orders", json={**ORDER, **overrides}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["order"]


def insert_order(database, user, created_at, **fields):
    with database.session() as session:
        order = Order(
            user_id=user.id,
            order_number=fields.pop("order_number", f"MQ_{created_at:%d%H%M}"),
            customer_name=user.name,
            customer_email=user.email,
            total_price=10,
            created_at=created_at,
            **fields,
        )
        session.add(order)
        session.commit()
        session.refresh(order)
        return order


def test_orders_require_authentication(client: TestClient):
    assert client.get("/orders").status_code == 401
    assert client.post("/orders", json=ORDER).status_code == 401


def test_create_order_normalizes_fields(client: TestClient, customer, auth_headers):
    summary = place_order(client, auth_headers(customer))
    assert summary["order_number"] == "MQ_1001"
    assert summary["status"] == "PENDING"

    order = client.get(f"/orders/{summary['id']}", headers=auth_headers(customer)).json()
    assert order["paper_size"] == "A3"
    assert order["color_type"] == "FULL_COLOR"
    assert order["binding_type"] == "SPIRAL_BOUND"
    assert order["copies"] == 1
    assert order["pages"] == 12
    assert order["customer_email"] == "jane@example.com"
    assert order["admin_notes"] == "Service: DOCUMENT_PRINTING\nDelivery: courier"


def test_order_numbers_increment(client: TestClient, customer, auth_headers):
    first = place_order(client, auth_headers(customer))
    second = place_order(client, auth_headers(customer))
    assert first["order_number"] == "MQ_1001"
    assert second["order_number"] == "MQ_1002"


def test_create_order_rejects_bad_price(client: TestClient, customer, auth_headers):
    response = client.post("/orders", json={**ORDER, "total_price": "0"}, headers=auth_headers(customer))
    assert response.status_code == 400


def test_customer_sees_only_own_orders(client: TestClient, make_user, auth_headers):
    alice, bob = make_user(), make_user()
    mine = place_order(client, auth_headers(alice))
    place_order(client, auth_headers(bob))

    listed = client.get("/orders", headers=auth_headers(alice)).json()
    assert [o["id"] for o in listed] == [mine["id"]]


def test_customer_cannot_read_foreign_order(client: TestClient, make_user, auth_headers):
    alice, bob = make_user(), make_user()
    theirs = place_order(client, auth_headers(bob))

    response = client.get(f"/orders/{theirs['id']}", headers=auth_headers(alice))
    assert response.status_code == 403


def test_list_all_is_staff_only_and_newest_first(client: TestClient, database, customer, staff, auth_headers):
    insert_order(database, customer, datetime(2024, 1, 1), order_number="MQ_1001")
    insert_order(database, customer, datetime(2024, 3, 1), order_number="MQ_1003")
    insert_order(database, customer, datetime(2024, 2, 1), order_number="MQ_1002")

    assert client.get("/orders/all", headers=auth_headers(customer)).status_code == 403

    rows = client.get("/orders/all", headers=auth_headers(staff)).json()
    assert [o["order_number"] for o in rows] == ["MQ_1003", "MQ_1002", "MQ_1001"]
    assert rows[0]["user"]["email"] == customer.email


def test_update_status(client: TestClient, customer, staff, auth_headers):
    order = place_order(client, auth_headers(customer))

    forbidden = client.patch(f"/orders/{order['id']}", json={"status": "READY"}, headers=auth_headers(customer))
    assert forbidden.status_code == 403

    bad = client.patch(f"/orders/{order['id']}", json={"status": "SHIPPED"}, headers=auth_headers(staff))
    assert bad.status_code == 400

    ok = client.patch(f"/orders/{order['id']}", json={"status": "READY"}, headers=auth_headers(staff))
    assert ok.status_code == 200
    assert ok.json()["status"] == "READY"


def test_update_missing_order(client: TestClient, staff, auth_headers):
    response = client.patch("/orders/missing", json={"status": "READY"}, headers=auth_headers(staff))
    assert response.status_code == 404


def test_delete_files_soft_deletes_and_queues_purge(client: TestClient, database, customer, admin, auth_headers):
    order = place_order(
        client, auth_headers(customer),
        file_path="document/1700000000000_thesis.pdf",
        file_url="https://cdn.example.com/document/1700000000000_thesis.pdf",
    )

    response = client.post(f"/orders/{order['id']}/delete-files", headers=auth_headers(admin))
    assert response.status_code == 200
    body = response.json()["order"]
    assert body["files_deleted_at"] is not None
    assert body["file_path"] is None
    assert body["file_url"] is None

    with database.session() as session:
        queued = session.exec(select(FilePurge)).all()
    assert [q.path for q in queued] == ["document/1700000000000_thesis.pdf"]

    again = client.post(f"/orders/{order['id']}/delete-files", headers=auth_headers(admin))
    assert again.status_code == 404


def test_delete_files_forbidden_for_customer(client: TestClient, customer, auth_headers):
    order = place_order(client, auth_headers(customer))
    response = client.post(f"/orders/{order['id']}/delete-files", headers=auth_headers(customer))
    assert response.status_code == 403


def test_staff_sees_every_order(client: TestClient, make_user, staff, auth_headers):
    alice, bob = make_user(), make_user()
    place_order(client, auth_headers(alice))
    place_order(client, auth_headers(bob))

    assert len(client.get("/orders", headers=auth_headers(staff)).json()) == 2


def test_demoted_staff_token_is_scoped_to_own_orders(client: TestClient, database, make_user, customer, auth_headers):
    demoted = make_user("STAFF")
    stale_headers = auth_headers(demoted)
    place_order(client, auth_headers(customer))

    with database.session() as session:
        row = session.get(User, demoted.id)
        row.role = "CUSTOMER"
        session.add(row)
        session.commit()

    assert client.get("/orders/all", headers=stale_headers).status_code == 403
    assert client.get("/orders", headers=stale_headers).json() == []
