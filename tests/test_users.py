# tests/test_users.py

"""
User administration, staff management and the profile endpoints.
"""

from fastapi.testclient import TestClient
from sqlmodel import select

from core.security import verify_password
from models.message import Message, MessageResponse
from models.order import Order
from models.user import User


def test_list_users_admin_only(client: TestClient, admin, staff, customer, auth_headers):
    assert client.get("/users", headers=auth_headers(staff)).status_code == 403
    assert client.get("/users").status_code == 401

    rows = client.get("/users", headers=auth_headers(admin)).json()
    assert {u["id"] for u in rows} == {admin.id, staff.id, customer.id}
    assert all("password" not in u for u in rows)


def test_staff_cannot_delete_users(client: TestClient, database, staff, customer, auth_headers):
    response = client.delete(f"/users/{customer.id}", headers=auth_headers(staff))
    assert response.status_code == 403

    with database.session() as session:
        assert session.get(User, customer.id) is not None


def test_non_admin_gets_403_before_lookup(client: TestClient, staff, auth_headers):
    response = client.delete("/users/does-not-exist", headers=auth_headers(staff))
    assert response.status_code == 403


def test_admin_users_are_immutable(client: TestClient, make_user, admin, auth_headers):
    other_admin = make_user("ADMIN")
    response = client.delete(f"/users/{other_admin.id}", headers=auth_headers(admin))

    assert response.status_code == 403
    assert response.json()["detail"] == "Cannot delete admin users"


def test_admin_cannot_delete_self(client: TestClient, admin, auth_headers):
    response = client.delete(f"/users/{admin.id}", headers=auth_headers(admin))
    assert response.status_code == 403
    assert response.json()["detail"] == "Cannot delete your own account"


def test_delete_missing_user(client: TestClient, admin, auth_headers):
    assert client.delete("/users/missing", headers=auth_headers(admin)).status_code == 404


def test_delete_user_cascades(client: TestClient, database, admin, staff, customer, auth_headers):
    order = client.post(
        "/orders",
        json={"customer_name": "C", "customer_email": "c@example.com", "total_price": 5},
        headers=auth_headers(customer),
    ).json()["order"]
    message = client.post(
        "/messages",
        json={"subject": "Hi", "message": "Question"},
        headers=auth_headers(customer),
    ).json()
    client.post(f"/messages/{message['id']}/respond", json={"message": "Answer"}, headers=auth_headers(staff))

    response = client.delete(f"/users/{customer.id}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["success"] is True

    with database.session() as session:
        assert session.get(User, customer.id) is None
        assert session.get(Order, order["id"]) is None
        assert session.get(Message, message["id"]) is None
        assert session.exec(select(MessageResponse)).all() == []

    again = client.delete(f"/users/{customer.id}", headers=auth_headers(admin))
    assert again.status_code == 404


# -----------------------------------------------------
# Profile
# -----------------------------------------------------
def test_profile_read_and_update(client: TestClient, customer, auth_headers):
    profile = client.get("/users/me", headers=auth_headers(customer))
    assert profile.status_code == 200
    assert profile.json()["email"] == customer.email

    missing_school = client.patch("/users/me", json={"name": "New Name"}, headers=auth_headers(customer))
    assert missing_school.status_code == 400

    updated = client.patch(
        "/users/me",
        json={"name": "New Name", "school": "State University", "phone": "555-0100"},
        headers=auth_headers(customer),
    )
    assert updated.status_code == 200
    assert updated.json()["school"] == "State University"


# -----------------------------------------------------
# Staff management
# -----------------------------------------------------
def test_create_staff_and_duplicate(client: TestClient, admin, auth_headers):
    payload = {"name": "Printer Pat", "email": "pat@example.com", "password": "Secret123"}

    created = client.post("/staff", json=payload, headers=auth_headers(admin))
    assert created.status_code == 201
    assert created.json()["user"]["role"] == "STAFF"

    duplicate = client.post("/staff", json=payload, headers=auth_headers(admin))
    assert duplicate.status_code == 409


def test_staff_list_excludes_customers(client: TestClient, admin, staff, customer, auth_headers):
    rows = client.get("/staff", headers=auth_headers(admin)).json()
    assert {u["id"] for u in rows} == {admin.id, staff.id}


def test_update_staff(client: TestClient, admin, staff, auth_headers):
    response = client.put(f"/staff/{staff.id}", json={"name": "Renamed"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Renamed"


def test_delete_staff_shares_user_rules(client: TestClient, make_user, admin, staff, auth_headers):
    other_admin = make_user("ADMIN")
    assert client.delete(f"/staff/{other_admin.id}", headers=auth_headers(admin)).status_code == 403
    assert client.delete(f"/staff/{staff.id}", headers=auth_headers(admin)).status_code == 200


def test_staff_create_rejects_malformed_email(client: TestClient, database, admin, auth_headers):
    payload = {"name": "Printer Pat", "email": "not-an-email", "password": "Secret123"}

    response = client.post("/staff", json=payload, headers=auth_headers(admin))
    assert response.status_code == 400

    with database.session() as session:
        assert session.exec(select(User).where(User.name == "Printer Pat")).first() is None


# -----------------------------------------------------
# Admin accounts cannot be edited by other admins
# -----------------------------------------------------
def test_admin_cannot_demote_then_delete_admin(client: TestClient, database, make_user, admin, auth_headers):
    other_admin = make_user("ADMIN")

    demote = client.patch(f"/users/{other_admin.id}", json={"role": "STAFF"}, headers=auth_headers(admin))
    assert demote.status_code == 403
    assert demote.json()["detail"] == "Cannot modify admin users"

    delete = client.delete(f"/users/{other_admin.id}", headers=auth_headers(admin))
    assert delete.status_code == 403

    with database.session() as session:
        row = session.get(User, other_admin.id)
        assert row is not None
        assert row.role == "ADMIN"


def test_staff_endpoint_cannot_reset_admin_password(client: TestClient, database, make_user, admin, auth_headers):
    other_admin = make_user("ADMIN")

    response = client.put(
        f"/staff/{other_admin.id}",
        json={"role": "CUSTOMER", "password": "Hijacked123"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 403

    with database.session() as session:
        row = session.get(User, other_admin.id)
        assert row.role == "ADMIN"
        assert verify_password("Password123", row.password)
        assert not verify_password("Hijacked123", row.password)


def test_admin_edits_own_account_through_profile_only(client: TestClient, database, admin, auth_headers):
    response = client.patch(f"/users/{admin.id}", json={"role": "CUSTOMER"}, headers=auth_headers(admin))
    assert response.status_code == 403
    assert response.json()["detail"] == "Cannot modify your own account"

    with database.session() as session:
        assert session.get(User, admin.id).role == "ADMIN"


def test_admin_updates_customer(client: TestClient, database, admin, customer, auth_headers):
    response = client.patch(f"/users/{customer.id}", json={"role": "STAFF"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "STAFF"

    with database.session() as session:
        assert session.get(User, customer.id).role == "STAFF"


def test_update_missing_user(client: TestClient, admin, auth_headers):
    assert client.patch("/users/missing", json={"name": "X"}, headers=auth_headers(admin)).status_code == 404


# -----------------------------------------------------
# Non-admins leave accounts untouched
# -----------------------------------------------------
def test_staff_cannot_update_users(client: TestClient, database, staff, customer, auth_headers):
    response = client.patch(f"/users/{customer.id}", json={"name": "Renamed"}, headers=auth_headers(staff))
    assert response.status_code == 403

    with database.session() as session:
        assert session.get(User, customer.id).name == customer.name


def test_staff_cannot_update_staff_accounts(client: TestClient, database, make_user, staff, auth_headers):
    colleague = make_user("STAFF")

    response = client.put(
        f"/staff/{colleague.id}",
        json={"role": "ADMIN", "password": "Promoted123"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 403

    with database.session() as session:
        row = session.get(User, colleague.id)
        assert row.role == "STAFF"
        assert verify_password("Password123", row.password)


def test_customer_cannot_create_staff(client: TestClient, database, customer, auth_headers):
    payload = {"name": "Sneaky", "email": "sneaky@example.com", "password": "Secret123", "role": "ADMIN"}

    assert client.post("/staff", json=payload, headers=auth_headers(customer)).status_code == 403

    with database.session() as session:
        assert session.exec(select(User).where(User.email == "sneaky@example.com")).first() is None


# -----------------------------------------------------
# The stored role wins over the token's claim
# -----------------------------------------------------
def test_deleted_admin_token_loses_admin_rights(client: TestClient, database, make_user, admin, auth_headers):
    other_admin = make_user("ADMIN")
    stale_headers = auth_headers(other_admin)

    with database.session() as session:
        session.delete(session.get(User, other_admin.id))
        session.commit()

    assert client.get("/users", headers=stale_headers).status_code == 403
    assert client.get("/users", headers=auth_headers(admin)).status_code == 200


def test_demoted_admin_token_loses_admin_rights(client: TestClient, database, make_user, customer, auth_headers):
    demoted = make_user("ADMIN")
    stale_headers = auth_headers(demoted)

    with database.session() as session:
        row = session.get(User, demoted.id)
        row.role = "CUSTOMER"
        session.add(row)
        session.commit()

    response = client.delete(f"/users/{customer.id}", headers=stale_headers)
    assert response.status_code == 403

    with database.session() as session:
        assert session.get(User, customer.id) is not None
