from fastapi.testclient import TestClient

from giftlist.main import app


def test_health():
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_routes_are_mounted():
    paths = {getattr(route, "path", None) for route in app.routes}
    for path in (
        "/api/scrape-product",
        "/api/scrape-amazon",
        "/api/auth/login",
        "/api/auth/logout",
        "/api/v1/backoffice/gifts",
        "/api/v1/gifts/{hex_key}",
        "/backoffice/login",
        "/backoffice/gifts/new",
        "/backoffice/users",
        "/backoffice/persons/{person_id}",
        "/gifts/{hex_key}",
    ):
        assert path in paths


def test_validation_errors_use_the_error_payload(app_factory):
    from giftlist.routes.auth import router

    with TestClient(app_factory(router)) as client:
        response = client.post("/api/auth/login", content="not json", headers={"content-type": "application/json"})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
    assert response.json()["error"] == "Invalid request"


def test_database_url_driver_mapping():
    from giftlist.db import async_database_url, sync_database_url

    pg = "postgresql://gift:p%40ss@db:5432/giftlist"
    assert async_database_url(pg).drivername == "postgresql+asyncpg"
    assert async_database_url(pg).password == "p@ss"
    assert sync_database_url("postgresql+asyncpg://gift@db/giftlist").drivername == "postgresql+psycopg2"
    assert sync_database_url("sqlite+aiosqlite:///./local.sqlite").drivername == "sqlite"
    assert async_database_url("sqlite+aiosqlite:///./local.sqlite").drivername == "sqlite+aiosqlite"
