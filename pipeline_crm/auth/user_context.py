"""Explicit acting-user identity passed into repository mutations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pipeline_crm.core.exceptions import AuthenticationError


@dataclass(frozen=True)
class UserContext:
    user_id: str
    email: str | None = None

    @property
    def display_name(self) -> str:
        """Author label stamped on audit entries."""
        return self.email or self.user_id


def from_claims(claims: dict[str, Any]) -> UserContext:
    """Build user context from decoded JWT claims."""
    try:
        user_id = str(claims["sub"]).strip()
    except (KeyError, TypeError) as exc:
        raise AuthenticationError("Token claims are missing user context.") from exc
    if not user_id:
        raise AuthenticationError("Token claims are missing user context.")

    email = claims.get("email")
    return UserContext(user_id=user_id, email=str(email) if email else None)
