"""Configuration module for the Pipeline CRM application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from pipeline_crm import __version__
from pipeline_crm.core.exceptions import ConfigurationError

load_dotenv()

GATEWAY_BACKENDS = {"sql", "rest"}
MIN_REST_JWT_SECRET_LENGTH = 32


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    GATEWAY_BACKEND: str
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    SUPABASE_URL: str | None
    SUPABASE_ANON_KEY: str | None
    GATEWAY_TIMEOUT_SECONDS: float | None
    JWT_SECRET: str
    JWT_ACCESS_TTL_MINUTES: int
    JWT_REFRESH_TTL_DAYS: int
    NOTIFICATION_HISTORY_SIZE: int
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str | None

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=False)

    config = Config(
        APP_NAME="Pipeline CRM",
        APP_VERSION=os.getenv("APP_VERSION", __version__),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        GATEWAY_BACKEND=os.getenv("GATEWAY_BACKEND", "sql").strip().lower(),
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./pipeline_crm.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        SUPABASE_URL=os.getenv("SUPABASE_URL"),
        SUPABASE_ANON_KEY=os.getenv("SUPABASE_ANON_KEY"),
        GATEWAY_TIMEOUT_SECONDS=_as_optional_float(os.getenv("GATEWAY_TIMEOUT_SECONDS")),
        JWT_SECRET=os.getenv("JWT_SECRET", "change_me_jwt_secret"),
        JWT_ACCESS_TTL_MINUTES=int(os.getenv("JWT_ACCESS_TTL_MINUTES", "60")),
        JWT_REFRESH_TTL_DAYS=int(os.getenv("JWT_REFRESH_TTL_DAYS", "14")),
        NOTIFICATION_HISTORY_SIZE=int(os.getenv("NOTIFICATION_HISTORY_SIZE", "50")),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "8000")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE") or None,
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2", "postgresql+psycopg"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    if config.GATEWAY_BACKEND not in GATEWAY_BACKENDS:
        raise ConfigurationError("GATEWAY_BACKEND must be one of: rest, sql.")
    if config.GATEWAY_BACKEND == "sql":
        _validate_database_url(config.DATABASE_URL)
    else:
        if not config.SUPABASE_URL or not config.SUPABASE_ANON_KEY:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_ANON_KEY are required for the rest gateway.")
        if urlparse(config.SUPABASE_URL).scheme not in {"http", "https"}:
            raise ConfigurationError("SUPABASE_URL must be an http(s) URL.")
        # Access tokens are forwarded to PostgREST, which only accepts tokens
        # signed with the project's JWT secret (at least 32 characters).
        if "change_me" in config.JWT_SECRET.lower() or len(config.JWT_SECRET) < MIN_REST_JWT_SECRET_LENGTH:
            raise ConfigurationError("JWT_SECRET must be the hosted project's JWT secret for the rest gateway.")

    if config.GATEWAY_TIMEOUT_SECONDS is not None and config.GATEWAY_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("GATEWAY_TIMEOUT_SECONDS must be > 0 when set.")
    if config.JWT_ACCESS_TTL_MINUTES < 1:
        raise ConfigurationError("JWT_ACCESS_TTL_MINUTES must be >= 1.")
    if config.JWT_REFRESH_TTL_DAYS < 1:
        raise ConfigurationError("JWT_REFRESH_TTL_DAYS must be >= 1.")
    if config.NOTIFICATION_HISTORY_SIZE < 1:
        raise ConfigurationError("NOTIFICATION_HISTORY_SIZE must be >= 1.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.JWT_SECRET.lower():
        raise ConfigurationError("Production JWT_SECRET uses a placeholder value.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
