"""Build the configured persistence gateway."""

from __future__ import annotations

from pipeline_crm.core.config import Config, get_config
from pipeline_crm.database.db import get_session_factory
from pipeline_crm.gateway.base import PersistenceGateway
from pipeline_crm.gateway.rest_gateway import RestGateway
from pipeline_crm.gateway.sql_gateway import SqlGateway


def build_gateway(config: Config | None = None, access_token: str | None = None) -> PersistenceGateway:
    cfg = config or get_config()
    if cfg.GATEWAY_BACKEND == "rest":
        return RestGateway(
            base_url=cfg.SUPABASE_URL or "",
            api_key=cfg.SUPABASE_ANON_KEY or "",
            access_token=access_token,
            timeout=cfg.GATEWAY_TIMEOUT_SECONDS,
        )
    return SqlGateway(get_session_factory())
