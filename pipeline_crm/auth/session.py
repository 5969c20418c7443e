"""Session state and sign-in/sign-out notifications for the auth service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from pipeline_crm.auth.jwt import ACCESS, decode_jwt
from pipeline_crm.auth.user_context import UserContext, from_claims
from pipeline_crm.core.enums import AuthEvent
from pipeline_crm.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    user: UserContext
    access_token: str
    expires_at: datetime

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= datetime.now(timezone.utc)


AuthListener = Callable[[AuthEvent, "AuthSession | None"], None]


class Subscription:
    """Handle returned by `on_auth_state_change`; call `unsubscribe()` to stop."""

    def __init__(self, manager: "AuthSessionManager", listener: AuthListener) -> None:
        self._manager = manager
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._manager._remove_listener(self._listener)
            self.active = False


class AuthSessionManager:
    """Holds the current session and notifies subscribers of transitions."""

    def __init__(self, secret: str) -> None:
        self._secret = secret
        self._session: AuthSession | None = None
        self._listeners: list[AuthListener] = []

    def get_session(self) -> AuthSession | None:
        """Return the current session, dropping it once expired."""
        if self._session is not None and self._session.is_expired:
            logger.info("auth.session.expired", extra={"event": "auth.session.expired"})
            self._session = None
            self._emit(AuthEvent.SIGNED_OUT, None)
        return self._session

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        """Subscribe to session transitions; the current state is replayed once."""
        self._listeners.append(listener)
        self._deliver(listener, AuthEvent.INITIAL_SESSION, self.get_session())
        return Subscription(self, listener)

    def sign_in(self, access_token: str) -> AuthSession:
        claims = decode_jwt(access_token, secret=self._secret, expected_use=ACCESS)
        session = AuthSession(
            user=from_claims(claims),
            access_token=access_token,
            expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
        )
        self._session = session
        logger.info(
            "auth.signed_in",
            extra={"event": "auth.signed_in", "user_id": session.user.user_id},
        )
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_out(self) -> None:
        if self._session is None:
            return
        user_id = self._session.user.user_id
        self._session = None
        logger.info("auth.signed_out", extra={"event": "auth.signed_out", "user_id": user_id})
        self._emit(AuthEvent.SIGNED_OUT, None)

    def require_session(self) -> AuthSession:
        """Gate access to the dashboard: raise unless a live session exists."""
        session = self.get_session()
        if session is None:
            raise AuthenticationError("Sign in required.")
        return session

    def _remove_listener(self, listener: AuthListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        for listener in list(self._listeners):
            self._deliver(listener, event, session)

    @staticmethod
    def _deliver(listener: AuthListener, event: AuthEvent, session: AuthSession | None) -> None:
        try:
            listener(event, session)
        except Exception:
            logger.exception("auth.listener_failed", extra={"event": "auth.listener_failed"})
