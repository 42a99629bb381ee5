# tests/test_health.py
from fastapi import status
from fastapi.testclient import TestClient


def test_health_check(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_root_responds(client: TestClient) -> None:
    """Verify that the root endpoint describes the API."""
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["docs"] == "/docs"


def test_startup_creates_tables_when_configured(app, mocker, monkeypatch) -> None:
    from whalebyte_moderation.main import settings

    create_tables = mocker.patch("whalebyte_moderation.main.create_tables")
    monkeypatch.setattr(settings, "create_tables_on_startup", True)

    with TestClient(app):
        pass

    create_tables.assert_called_once_with()
