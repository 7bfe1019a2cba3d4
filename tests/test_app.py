import asyncio
import logging

import pytest
from sqlalchemy.exc import OperationalError

from finance_api.auth import hash_password, pwd_context
from finance_api.config import Settings, load_settings
from finance_api.db import normalize_database_url
from finance_api.main import create_app


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_unknown_route_uses_error_body(client):
    resp = client.get("/budgets")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_wrong_method_uses_error_body(client):
    resp = client.patch("/users/1", json={})
    assert resp.status_code == 405
    assert "error" in resp.json()


def test_each_app_gets_its_own_database():
    first = create_app(Settings(database_url="sqlite://"))
    second = create_app(Settings(database_url="sqlite://"))
    assert first.state.engine is not second.state.engine
    assert first.state.session_factory is not second.state.session_factory


def test_startup_aborts_when_database_unreachable(tmp_path, caplog):
    missing = tmp_path / "no-such-dir" / "finance.db"
    app = create_app(Settings(database_url=f"sqlite:///{missing}"))

    async def start():
        async with app.router.lifespan_context(app):
            pass

    with caplog.at_level(logging.CRITICAL, logger="finance_api.main"):
        with pytest.raises(OperationalError):
            asyncio.run(start())
    assert any(r.levelno == logging.CRITICAL for r in caplog.records)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+psycopg2://u:p@h/db", "postgresql+psycopg2://u:p@h/db"),
        ("sqlite:///./finance.db", "sqlite:///./finance.db"),
    ],
)
def test_normalize_database_url(url, expected):
    assert normalize_database_url(url) == expected


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()
    assert settings == Settings(
        database_url="sqlite:///./other.db", host="0.0.0.0", port=9001, log_level="DEBUG"
    )


def test_load_settings_defaults(monkeypatch):
    for name in ("DATABASE_URL", "HOST", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("finance_api.config.load_dotenv", lambda: False)

    assert load_settings() == Settings()


def test_load_settings_rejects_bad_port(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError):
        load_settings()


def test_hashes_are_salted():
    a, b = hash_password("same"), hash_password("same")
    assert a != b
    assert pwd_context.verify("same", a) and pwd_context.verify("same", b)


def test_engine_disposed_when_lifespan_exits_with_error():
    app = create_app(Settings(database_url="sqlite://"))
    pool_before = app.state.engine.pool

    async def serve_then_fail():
        async with app.router.lifespan_context(app):
            raise RuntimeError("worker crashed")

    with pytest.raises(RuntimeError):
        asyncio.run(serve_then_fail())
    # dispose() swaps in a fresh pool
    assert app.state.engine.pool is not pool_before
