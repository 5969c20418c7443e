"""Persistence gateway package."""

from pipeline_crm.gateway.base import PROSPECTS, PROSPECT_ACTIVITIES, PROSPECT_FILES, PersistenceGateway
from pipeline_crm.gateway.rest_gateway import RestGateway
from pipeline_crm.gateway.sql_gateway import SqlGateway

__all__ = [
    "PROSPECTS",
    "PROSPECT_ACTIVITIES",
    "PROSPECT_FILES",
    "PersistenceGateway",
    "RestGateway",
    "SqlGateway",
]
