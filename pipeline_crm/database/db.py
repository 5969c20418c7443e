"""Database connection and session management for the SQL gateway."""

from __future__ import annotations

import logging
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from pipeline_crm.core.config import get_config

logger = logging.getLogger(__name__)

config = get_config()
DATABASE_URL = config.DATABASE_URL


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on FK enforcement so prospect deletes cascade on sqlite."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=config.DEBUG,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            database_url,
            echo=config.DEBUG,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_size=10,
            max_overflow=20,
        )
    enable_sqlite_foreign_keys(engine)
    return engine


engine = _build_engine(DATABASE_URL)
SessionLocal = sessionmaker(
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_engine() -> Engine:
    """Return the active SQLAlchemy engine."""
    return engine


def get_session_factory() -> sessionmaker:
    """Return the sessionmaker bound to the active engine."""
    return SessionLocal


def get_active_database_url() -> str:
    return DATABASE_URL


def verify_database_connection(bind: Engine | None = None) -> bool:
    """Verify DB connectivity during startup."""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:  # pragma: no cover - exercised in deployment.
        logger.error(
            "database.connection_failed",
            extra={"event": "database.connection_failed"},
        )
        logger.error("database.connection_failed.details: %s", exc)
        return False
