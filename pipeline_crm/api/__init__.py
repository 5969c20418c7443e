"""HTTP API package."""

from pipeline_crm.api.router import get_api_router

__all__ = ["get_api_router"]
