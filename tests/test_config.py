from __future__ import annotations

import pytest

from pipeline_crm.core.config import _build_config
from pipeline_crm.core.exceptions import ConfigurationError

PROJECT_JWT_SECRET = "super-secret-jwt-token-with-at-least-32-characters"

ENV_KEYS = (
    "ENV",
    "DEBUG",
    "GATEWAY_BACKEND",
    "DATABASE_URL",
    "DB_CONNECTIVITY_REQUIRED",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "GATEWAY_TIMEOUT_SECONDS",
    "JWT_SECRET",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_use_local_sql_gateway():
    config = _build_config("development")

    assert config.GATEWAY_BACKEND == "sql"
    assert config.DATABASE_URL.startswith("sqlite")
    assert config.GATEWAY_TIMEOUT_SECONDS is None
    assert config.DB_CONNECTIVITY_REQUIRED is False


def test_rest_gateway_requires_hosted_credentials(monkeypatch):
    monkeypatch.setenv("GATEWAY_BACKEND", "rest")

    with pytest.raises(ConfigurationError, match="SUPABASE_URL"):
        _build_config("development")

    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.test")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("JWT_SECRET", PROJECT_JWT_SECRET)
    monkeypatch.setenv("GATEWAY_TIMEOUT_SECONDS", "7.5")

    config = _build_config("development")
    assert config.GATEWAY_TIMEOUT_SECONDS == 7.5


def test_production_rejects_placeholder_secret():
    with pytest.raises(ConfigurationError, match="JWT_SECRET"):
        _build_config("production")


def test_production_forces_debug_off(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("JWT_SECRET", "a-real-secret")

    config = _build_config("production")

    assert config.DEBUG is False
    assert config.DB_CONNECTIVITY_REQUIRED is True


@pytest.mark.parametrize(
    "key, value",
    [
        ("GATEWAY_BACKEND", "firebase"),
        ("DATABASE_URL", "mysql://db/pipeline"),
        ("GATEWAY_TIMEOUT_SECONDS", "0"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_settings_are_rejected(monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigurationError):
        _build_config("development")


@pytest.mark.parametrize("secret", [None, "too-short-secret"])
def test_rest_gateway_requires_project_jwt_secret(monkeypatch, secret):
    monkeypatch.setenv("GATEWAY_BACKEND", "rest")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.test")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    if secret is not None:
        monkeypatch.setenv("JWT_SECRET", secret)

    with pytest.raises(ConfigurationError, match="JWT_SECRET"):
        _build_config("development")
