"""Create the gateway schema on the configured database."""

from __future__ import annotations

import logging

import pipeline_crm.database.db as db_module
from pipeline_crm.core.logging_config import configure_logging
from pipeline_crm.database.models import Base

logger = logging.getLogger(__name__)


def init_db() -> None:
    configure_logging()
    active_url = db_module.get_active_database_url()
    Base.metadata.create_all(bind=db_module.get_engine())
    logger.info(
        "database.tables.created",
        extra={
            "event": "database.tables.created",
            "table": ",".join(sorted(Base.metadata.tables)),
        },
    )
    logger.info("database.url: %s", active_url.split("://", 1)[0])


def main() -> None:
    init_db()


if __name__ == "__main__":
    main()
