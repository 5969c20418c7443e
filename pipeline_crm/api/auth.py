"""Auth endpoints.

`/auth/login` does not check credentials: any non-empty email and password get a
token pair for a user id derived from the email. `/auth/refresh` exchanges a
valid refresh token for a new pair.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, HTTPException, status

from pipeline_crm.auth.jwt import REFRESH, create_token_pair, decode_jwt
from pipeline_crm.core.config import get_config
from pipeline_crm.core.exceptions import AuthenticationError
from pipeline_crm.schemas.auth import LoginRequest, RefreshRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_id_for(email: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{email.strip().lower()}"))


def _token_response(user_id: str, email: str | None) -> TokenResponse:
    cfg = get_config()
    tokens = create_token_pair(
        user_id=user_id,
        email=email,
        secret=cfg.JWT_SECRET,
        access_ttl_minutes=cfg.JWT_ACCESS_TTL_MINUTES,
        refresh_ttl_days=cfg.JWT_REFRESH_TTL_DAYS,
    )
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
    )


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest) -> TokenResponse:
    if not payload.email.strip() or not payload.password.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials.")
    email = payload.email.strip().lower()
    return _token_response(_user_id_for(email), email)


@router.post("/refresh", response_model=TokenResponse)
def refresh(payload: RefreshRequest) -> TokenResponse:
    cfg = get_config()
    try:
        claims = decode_jwt(payload.refresh_token, secret=cfg.JWT_SECRET, expected_use=REFRESH)
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    return _token_response(str(claims["sub"]), claims.get("email"))
