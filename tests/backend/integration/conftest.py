import importlib

import pytest

fastapi = pytest.importorskip("fastapi")
TestClient = pytest.importorskip("fastapi.testclient").TestClient


@pytest.fixture
def app_modules(monkeypatch, store):
    """
    Load the app with the in-memory store behind the repositories so startup
    and requests never touch PostgreSQL or Redis.
    """
    app_module = importlib.import_module("sunmile.main")
    rate_limit = importlib.import_module("sunmile.infrastructure.security.rate_limit")

    monkeypatch.setattr(app_module.datastore, "ensure_initialized", lambda: None)
    monkeypatch.setattr(app_module.datastore, "shutdown", lambda: None)
    monkeypatch.setattr(rate_limit, "enforce", lambda *args, **kwargs: None)

    return {
        "app": app_module.app,
        "prefix": app_module.API_PREFIX,
        "rate_limit": rate_limit,
        "store": store,
    }


@pytest.fixture
def client(app_modules):
    return TestClient(app_modules["app"], raise_server_exceptions=False)


@pytest.fixture
def api(app_modules):
    prefix = app_modules["prefix"]
    return lambda path: f"{prefix}{path}"


@pytest.fixture
def login(client, api):
    def _login(email: str, password: str = "Senha@123") -> dict:
        resp = client.post(api("/login"), json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login
