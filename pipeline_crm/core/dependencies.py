"""Dependency providers for API handlers."""

from __future__ import annotations

from functools import lru_cache

from pipeline_crm.core.config import Config, get_config
from pipeline_crm.gateway.base import PersistenceGateway
from pipeline_crm.gateway.factory import build_gateway
from pipeline_crm.gateway.rest_gateway import RestGateway
from pipeline_crm.services.notifications import NotificationCenter
from pipeline_crm.services.prospect_repository import ProspectRepository


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


@lru_cache(maxsize=1)
def _shared_gateway() -> PersistenceGateway:
    return build_gateway(get_settings())


def get_gateway_for_token(access_token: str | None) -> PersistenceGateway:
    """Gateway acting as the caller; the hosted backend applies its row policies."""
    gateway = _shared_gateway()
    if isinstance(gateway, RestGateway):
        return gateway.with_access_token(access_token)
    return gateway


@lru_cache(maxsize=1)
def get_notification_center() -> NotificationCenter:
    return NotificationCenter(history_size=get_settings().NOTIFICATION_HISTORY_SIZE)


def build_repository(gateway: PersistenceGateway) -> ProspectRepository:
    return ProspectRepository(gateway, notifier=get_notification_center())
