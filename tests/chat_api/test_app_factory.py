from fastapi.testclient import TestClient

from adawat.chat_api import app as app_module
from adawat.chat_api.app import create_app
from adawat.chat_api.config import ApiConfig


def test_docs_served_in_development():
    client = TestClient(create_app(ApiConfig(environment="development")))

    assert client.get("/docs").status_code == 200
    schema = client.get("/openapi.json").json()
    assert "/test" in schema["paths"]
    assert "/test/stream-chat" in schema["paths"]


def test_docs_hidden_in_production():
    client = TestClient(create_app(ApiConfig(environment="production")))

    assert client.get("/docs").status_code == 404
    assert client.get("/openapi.json").status_code == 404


def test_https_redirect_when_enabled():
    client = TestClient(create_app(ApiConfig(https_redirect=True)))

    r = client.get("/health", follow_redirects=False)

    assert r.status_code == 307
    assert r.headers["location"] == "https://testserver/health"


def test_no_redirect_by_default(monkeypatch):
    async def fake_version():
        return "0.3.12"

    monkeypatch.setattr(app_module._ollama, "version", fake_version)
    client = TestClient(create_app(ApiConfig()))

    r = client.get("/health", follow_redirects=False)

    assert r.status_code == 200
    assert r.json() == {"status": "ok", "ollama": "0.3.12"}


def test_shutdown_closes_ollama_client(monkeypatch):
    closed = []

    async def fake_aclose():
        closed.append(True)

    monkeypatch.setattr(app_module._ollama, "aclose", fake_aclose)

    with TestClient(create_app(ApiConfig())) as client:
        assert client.get("/test/stream-chat").status_code == 400
        assert closed == []

    assert closed == [True]
