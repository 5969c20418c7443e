"""Startup validation and bootstrap helpers."""

from __future__ import annotations

import logging

from pipeline_crm.core.config import get_config
from pipeline_crm.core.dependencies import get_gateway_for_token
from pipeline_crm.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def validate_startup_config() -> None:
    """Fail-fast config and connectivity checks."""
    config = get_config()
    gateway_ok = get_gateway_for_token(None).ping()
    if not gateway_ok and config.DB_CONNECTIVITY_REQUIRED:
        raise RuntimeError("Gateway connectivity check failed.")
    if not gateway_ok:
        logger.warning(
            "startup.gateway.connectivity_optional_failed",
            extra={"event": "startup.gateway.connectivity_optional_failed"},
        )

    if config.is_production and config.GATEWAY_BACKEND == "sql" and config.DATABASE_URL.startswith("sqlite"):
        logger.warning(
            "startup.production.sqlite_detected",
            extra={"event": "startup.production.sqlite_detected"},
        )

    logger.info(
        "startup.config.validated",
        extra={"event": "startup.config.validated"},
    )


def bootstrap() -> None:
    """Initialize logging and validate runtime configuration."""
    configure_logging()
    validate_startup_config()
