# tests/test_app.py
import logging

import pytest
from flask import g

from notesapp import create_app
from notesapp.common.authz import CurrentUser
from notesapp.common.logging import REQUEST_LOGGER, RequestContextFilter
from notesapp.extensions import db
from notesapp.config import (
    ConfigError,
    REQUIRED_ENV_VARS,
    database_url,
    missing_env_vars,
    settings_from_env,
)
from notesapp.users.models import User

FULL_ENV = {
    "PG_USER": "notes",
    "PG_HOST": "db.internal",
    "PG_DATABASE": "notes",
    "PG_PASSWORD": "p@ss:word",
    "PG_PORT": "5432",
    "PORT": "8080",
    "JWT_SECRET": "access-secret",
    "REFRESH_TOKEN_SECRET": "refresh-secret",
    "GOOGLE_CLIENT_ID": "client.apps.googleusercontent.com",
    "FRONTEND_URL": "https://notes.example.com",
}


def test_missing_env_vars_lists_names():
    assert missing_env_vars(FULL_ENV) == []
    env = dict(FULL_ENV, JWT_SECRET="", PORT=None)
    del env["PG_HOST"]
    assert missing_env_vars(env) == ["PG_HOST", "PORT", "JWT_SECRET"]
    assert missing_env_vars({}) == list(REQUIRED_ENV_VARS)


def test_database_url_replaces_pg_vars():
    env = {k: v for k, v in FULL_ENV.items() if not k.startswith("PG_")}
    env["DATABASE_URL"] = "postgresql+psycopg://u:p@h/db"
    assert missing_env_vars(env) == []
    assert database_url(env) == "postgresql+psycopg://u:p@h/db"


def test_database_url_from_parts_escapes_password():
    url = database_url(FULL_ENV)
    assert url.startswith("postgresql+psycopg://notes:")
    assert "p%40ss%3Aword" in url
    assert url.endswith("@db.internal:5432/notes")


def test_settings_from_env():
    settings = settings_from_env(FULL_ENV)
    assert settings["JWT_SECRET_KEY"] == "access-secret"
    assert settings["REFRESH_TOKEN_SECRET"] == "refresh-secret"
    assert settings["CORS_ORIGINS"] == "https://notes.example.com"
    assert settings["PORT"] == 8080


def test_settings_from_env_reads_tunables():
    settings = settings_from_env(dict(
        FULL_ENV,
        DB_POOL_MAX="3",
        DB_POOL_TIMEOUT="2",
        RATELIMIT_AUTH="1 per hour",
        MAX_CONTENT_LENGTH="123",
        ENFORCE_HTTPS="TRUE",
        CORS_ALLOW_HEADERS="Content-Type,X-Request-Id",
    ))
    assert settings["SQLALCHEMY_ENGINE_OPTIONS"]["pool_size"] == 3
    assert settings["SQLALCHEMY_ENGINE_OPTIONS"]["pool_timeout"] == 2
    assert settings["SQLALCHEMY_ENGINE_OPTIONS"]["max_overflow"] == 0
    assert settings["RATELIMIT_AUTH"] == "1 per hour"
    assert settings["RATELIMIT_DEFAULT"] == "100 per 15 minutes"
    assert settings["MAX_CONTENT_LENGTH"] == 123
    assert settings["ENFORCE_HTTPS"] is True
    assert settings["CORS_ALLOW_HEADERS"] == "Content-Type,X-Request-Id"

    defaults = settings_from_env(FULL_ENV)
    assert defaults["SQLALCHEMY_ENGINE_OPTIONS"]["pool_size"] == 20
    assert defaults["MAX_CONTENT_LENGTH"] == 10 * 1024 * 1024
    assert defaults["ENFORCE_HTTPS"] is False


def test_startup_applies_env_tunables(monkeypatch, tmp_path, restore_limiter):
    monkeypatch.setenv("APP_ENV", "production")
    for name, value in FULL_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'notes.db'}")
    monkeypatch.setenv("DB_POOL_MAX", "3")
    monkeypatch.setenv("RATELIMIT_AUTH", "1 per hour")
    monkeypatch.setenv("MAX_CONTENT_LENGTH", "2048")

    app = create_app()
    assert app.config["RATELIMIT_AUTH"] == "1 per hour"
    assert app.config["MAX_CONTENT_LENGTH"] == 2048
    with app.app_context():
        assert db.engine.pool.size() == 3


def test_startup_halts_on_missing_config(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    for name in REQUIRED_ENV_VARS + ("DATABASE_URL",):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PORT", "5000")

    with pytest.raises(ConfigError) as exc:
        create_app()
    assert "PORT" not in exc.value.missing
    assert "JWT_SECRET" in exc.value.missing
    assert str(exc.value).startswith("Missing required environment variables: PG_USER")


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok", "env": "test", "db": "up"}


def test_security_and_request_id_headers(client):
    r = client.get("/healthz", headers={"X-Request-Id": "abc-123"})
    assert r.headers["X-Request-Id"] == "abc-123"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in r.headers

    generated = client.get("/healthz").headers["X-Request-Id"]
    assert generated and generated != "abc-123"


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/v1/nope")
    assert r.status_code == 404
    body = r.get_json()
    assert body["success"] is False and body["data"] is None
    assert body["error"]


def test_method_not_allowed_uses_envelope(client):
    r = client.get("/api/v1/users/login")
    assert r.status_code == 405
    assert r.get_json()["success"] is False


def test_cors_allows_frontend_with_credentials(client):
    r = client.get("/api/v1/notes", headers={"Origin": "http://localhost:5173"})
    assert r.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert r.headers["Access-Control-Allow-Credentials"] == "true"

    r = client.get("/api/v1/notes", headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in r.headers


def test_openapi_document(client):
    r = client.get("/openapi.json")
    assert r.status_code == 200
    doc = r.get_json()
    assert doc["openapi"] == "3.0.3"
    assert set(doc["paths"]) >= {
        "/api/v1/users/register",
        "/api/v1/users/login",
        "/api/v1/users/google",
        "/api/v1/users/refresh",
        "/api/v1/users/logout",
        "/api/v1/notes",
        "/api/v1/notes/{id}",
    }
    assert set(doc["paths"]["/api/v1/notes"]) == {"get", "post"}
    assert "Note" in doc["components"]["schemas"]


def test_request_log_line_carries_user(app, caplog, make_user):
    carol = make_user("logs@x.com")
    with app.app_context():
        user_id = User.query.filter_by(email="logs@x.com").one().id

    caplog.set_level(logging.DEBUG, logger=REQUEST_LOGGER)
    carol.get("/api/v1/notes", headers={"X-Request-Id": "rid-notes"})
    app.test_client().get("/api/v1/notes", headers={"X-Request-Id": "rid-anon"})
    carol.get("/healthz", headers={"X-Request-Id": "rid-health"})

    lines = {r.request_id: r for r in caplog.records if r.name == REQUEST_LOGGER}
    assert lines["rid-notes"].user_id == user_id
    assert lines["rid-notes"].endpoint == "notes.list_notes"
    assert lines["rid-notes"].status == 200
    assert lines["rid-notes"].levelno == logging.INFO
    assert lines["rid-anon"].user_id is None
    assert lines["rid-anon"].status == 401
    assert lines["rid-health"].levelno == logging.DEBUG


def test_context_filter_tags_records(app):
    record = logging.LogRecord("notesapp.notes", logging.ERROR, __file__, 1, "notes_db_error", None, None)
    with app.test_request_context("/api/v1/notes"):
        g.request_id = "rid-filter"
        g.current_user = CurrentUser(7, "x@x.com")
        assert RequestContextFilter().filter(record)
    assert (record.request_id, record.user_id) == ("rid-filter", 7)

    # hors requête: rien n'est ajouté
    bare = logging.LogRecord("notesapp", logging.INFO, __file__, 1, "startup", None, None)
    assert RequestContextFilter().filter(bare)
    assert not hasattr(bare, "request_id")
