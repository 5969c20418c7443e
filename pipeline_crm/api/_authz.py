"""Shared authentication and error-mapping helpers for API route modules."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from pipeline_crm.auth.session import AuthSessionManager
from pipeline_crm.auth.user_context import UserContext
from pipeline_crm.core.config import Config
from pipeline_crm.core.dependencies import build_repository, get_gateway_for_token, get_settings
from pipeline_crm.core.exceptions import (
    AuthenticationError,
    GatewayError,
    PipelineCRMException,
    RowNotFoundError,
    ValidationError,
)
from pipeline_crm.gateway.base import PersistenceGateway
from pipeline_crm.services.prospect_repository import ProspectRepository


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError("Authorization header is required.")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Authorization header must use Bearer token.")
    return parts[1].strip()


def map_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED, str(exc)
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
    if isinstance(exc, RowNotFoundError):
        return status.HTTP_404_NOT_FOUND, exc.message
    if isinstance(exc, GatewayError):
        if exc.status_code in {400, 409}:
            return exc.status_code, exc.message
        return status.HTTP_502_BAD_GATEWAY, exc.message
    if isinstance(exc, PipelineCRMException):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error."


def raise_http_error(exc: Exception) -> None:
    code, detail = map_error(exc)
    raise HTTPException(status_code=code, detail=detail) from exc


def get_access_token(authorization: str | None = Header(default=None, alias="Authorization")) -> str:
    try:
        return _extract_bearer_token(authorization)
    except AuthenticationError as exc:
        raise_http_error(exc)


def get_current_user(
    token: str = Depends(get_access_token),
    settings: Config = Depends(get_settings),
) -> UserContext:
    try:
        return AuthSessionManager(secret=settings.JWT_SECRET).sign_in(token).user
    except AuthenticationError as exc:
        raise_http_error(exc)


def get_gateway(token: str = Depends(get_access_token)) -> PersistenceGateway:
    return get_gateway_for_token(token)


def get_repository(gateway: PersistenceGateway = Depends(get_gateway)) -> ProspectRepository:
    return build_repository(gateway)
