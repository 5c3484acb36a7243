# tests/test_health.py

from fastapi.testclient import TestClient
from starlette.responses import PlainTextResponse
from starlette.routing import Host

from models.user import User


def test_health_app(client: TestClient):
    response = client.get("/health/app")
    assert response.status_code == 200
    assert response.json() == {"service": "EasyPrint API", "status": "ok"}


def test_health_db(client: TestClient):
    response = client.get("/health/db")
    assert response.json()["status"] == "ok"


def test_legacy_roles_migrated_on_startup(app, database, make_user):
    legacy = make_user("USER")

    # Startup runs the migration; shutdown disposes the engine
    with TestClient(app):
        with database.session() as session:
            assert session.get(User, legacy.id).role == "CUSTOMER"


def test_startup_tolerates_routes_without_path(app):
    app.router.routes.append(Host("assets.example.com", app=PlainTextResponse("assets")))

    with TestClient(app) as client:
        assert client.get("/health/app").status_code == 200
