"""Token lifecycle for proxy sessions: expiry detection, refresh, logout."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from gdriveproxy.errors import AuthError, NotAuthenticatedError, SessionExpiredError

from .auth_info import PendingLogin, TokenSet, TokenState, UserInfo
from .oauth_client import OAuthClient

logger = logging.getLogger(__name__)

# Tokens are refreshed this long before Google's stated expiry.
EXPIRY_BUFFER_MS: int = 5 * 60 * 1000


def is_expired(expires_at_ms: int, now_ms: int, buffer_ms: int = EXPIRY_BUFFER_MS) -> bool:
    return now_ms >= expires_at_ms - buffer_ms


@dataclass(slots=True)
class SessionData:
    tokens: TokenState = field(default_factory=TokenState)
    pending_login: Optional[PendingLogin] = None


class SessionStore:
    """
    In-memory session map: session_id -> SessionData.

    Entries are created on first use and removed only by delete().
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SessionData] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[SessionData]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> SessionData:
        with self._lock:
            data = self._sessions.get(session_id)
            if data is None:
                data = SessionData()
                self._sessions[session_id] = data
            return data

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


class TokenManager:
    """
    Owns the TokenState of one session.

    States:
        Absent -> Valid -> ExpiringNeedsRefresh -> Refreshing -> Valid | Absent
    """

    def __init__(
        self,
        oauth_client: OAuthClient,
        store: SessionStore,
        session_id: str,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._oauth = oauth_client
        self._store = store
        self._session_id = session_id
        self._clock = clock

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> TokenState:
        data = self._store.get(self._session_id)
        return data.tokens if data is not None else TokenState()

    @property
    def is_authenticated(self) -> bool:
        return self.state.access_token is not None

    def store_tokens(self, tokens: TokenSet, user: Optional[UserInfo] = None) -> TokenState:
        new_state = TokenState.from_token_set(tokens, user=user)
        self._store.get_or_create(self._session_id).tokens = new_state
        return new_state

    def set_user(self, user: UserInfo) -> None:
        data = self._store.get_or_create(self._session_id)
        old = data.tokens
        data.tokens = TokenState(
            access_token=old.access_token,
            refresh_token=old.refresh_token,
            expires_at_ms=old.expires_at_ms,
            user=user,
        )

    def needs_refresh(self) -> bool:
        tokens = self.state
        if tokens.access_token is None or tokens.expires_at_ms is None:
            return False
        return is_expired(tokens.expires_at_ms, self._now_ms())

    def current_token(self) -> Optional[str]:
        """
        Return a usable access token, or None.

        None means the caller should fall back to anonymous access. A failed
        refresh clears the session and also yields None; it never raises.
        """
        tokens = self.state
        if tokens.access_token is None:
            return None
        if not self.needs_refresh():
            return tokens.access_token
        try:
            return self._refresh(tokens).access_token
        except AuthError:
            return None

    def require_token(self) -> str:
        """
        Return a usable access token for call sites that must not degrade.

        Raises:
            NotAuthenticatedError: if the session never had a token.
            SessionExpiredError: if the token expired and refresh failed.
        """
        tokens = self.state
        if tokens.access_token is None:
            raise NotAuthenticatedError("Authentication required")
        if not self.needs_refresh():
            return tokens.access_token
        return self._refresh(tokens).access_token  # type: ignore[return-value]

    def refresh(self) -> TokenState:
        """
        Force a refresh regardless of expiry.

        Raises:
            SessionExpiredError: if no refresh token exists or refresh fails.
        """
        return self._refresh(self.state)

    def clear(self) -> None:
        data = self._store.get(self._session_id)
        if data is not None:
            data.tokens = TokenState()

    def logout(self) -> None:
        """
        Revoke the access token (best-effort) and clear all token fields.
        """
        token = self.state.access_token
        try:
            if token:
                self._oauth.revoke(token)
        except AuthError as exc:
            logger.warning("Token revoke failed for session %s: %s", self._session_id, exc)
        finally:
            self.clear()

    # ----------------------------
    # Internals
    # ----------------------------
    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _refresh(self, tokens: TokenState) -> TokenState:
        if not tokens.refresh_token:
            self.clear()
            raise SessionExpiredError("No refresh token available")

        try:
            fresh = self._oauth.refresh(tokens.refresh_token)
        except AuthError as exc:
            logger.warning("Token refresh failed for session %s: %s", self._session_id, exc)
            self.clear()
            raise SessionExpiredError(
                "Session expired. Please login again.",
                details={"reason": exc.auth_code.value},
                cause=exc,
            ) from exc

        new_state = TokenState(
            access_token=fresh.access_token,
            refresh_token=fresh.refresh_token or tokens.refresh_token,
            expires_at_ms=fresh.expires_at_ms,
            user=tokens.user,
        )
        self._store.get_or_create(self._session_id).tokens = new_state
        logger.info("Token auto-refreshed for session %s", self._session_id)
        return new_state
