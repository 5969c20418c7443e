"""JWT token utilities using HS256 signing."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from pipeline_crm.core.exceptions import AuthenticationError

ACCESS = "access"
REFRESH = "refresh"
# Role and audience the hosted PostgREST endpoint expects on a signed-in user token.
AUTHENTICATED_ROLE = "authenticated"


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(f"{data}{padding}".encode("ascii"))


def _sign(message: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return _b64url_encode(digest)


def _json_dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta) -> str:
    """Encode a signed JWT using HS256."""
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")

    now = datetime.now(timezone.utc)
    body = dict(payload)
    body.setdefault("iat", int(now.timestamp()))
    body.setdefault("exp", int((now + ttl).timestamp()))
    body.setdefault("jti", str(uuid.uuid4()))
    header = {"alg": "HS256", "typ": "JWT"}

    header_segment = _b64url_encode(_json_dumps(header).encode("utf-8"))
    payload_segment = _b64url_encode(_json_dumps(body).encode("utf-8"))
    signing_input = f"{header_segment}.{payload_segment}"
    signature = _sign(signing_input, secret=secret)
    return f"{signing_input}.{signature}"


def decode_jwt(
    token: str,
    secret: str,
    verify_exp: bool = True,
    expected_use: str | None = None,
) -> dict[str, Any]:
    """Decode and validate a signed JWT token.

    When `expected_use` is given the `token_use` claim must match it, so a
    refresh token can never stand in for an access token.
    """
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")
    try:
        header_segment, payload_segment, signature_segment = token.split(".")
    except ValueError as exc:
        raise AuthenticationError("Invalid token format.") from exc

    signing_input = f"{header_segment}.{payload_segment}"
    expected_signature = _sign(signing_input, secret=secret)
    if not hmac.compare_digest(expected_signature, signature_segment):
        raise AuthenticationError("Invalid token signature.")

    try:
        payload = json.loads(_b64url_decode(payload_segment).decode("utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise AuthenticationError("Invalid token payload.") from exc

    if verify_exp:
        exp = payload.get("exp")
        if exp is None:
            raise AuthenticationError("Token is missing exp claim.")
        if int(exp) < int(datetime.now(timezone.utc).timestamp()):
            raise AuthenticationError("Token has expired.")
    if expected_use is not None and payload.get("token_use") != expected_use:
        raise AuthenticationError(f"Token is not a valid {expected_use} token.")
    return payload


def create_access_token(user_id: str, email: str | None, secret: str, ttl_minutes: int = 60) -> str:
    """Create short-lived access token carrying the user identity."""
    payload = {
        "sub": str(user_id),
        "email": email,
        "token_use": ACCESS,
        "role": AUTHENTICATED_ROLE,
        "aud": AUTHENTICATED_ROLE,
    }
    return encode_jwt(payload=payload, secret=secret, ttl=timedelta(minutes=ttl_minutes))


def create_refresh_token(user_id: str, email: str | None, secret: str, ttl_days: int = 14) -> str:
    payload = {"sub": str(user_id), "email": email, "token_use": REFRESH}
    return encode_jwt(payload=payload, secret=secret, ttl=timedelta(days=ttl_days))


def create_token_pair(
    user_id: str,
    email: str | None,
    secret: str,
    access_ttl_minutes: int = 60,
    refresh_ttl_days: int = 14,
) -> TokenPair:
    """Create access + refresh token pair."""
    return TokenPair(
        access_token=create_access_token(user_id, email, secret=secret, ttl_minutes=access_ttl_minutes),
        refresh_token=create_refresh_token(user_id, email, secret=secret, ttl_days=refresh_ttl_days),
    )
