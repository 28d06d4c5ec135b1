"""OAuth client utilities for gdriveproxy."""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httplib2
import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gdriveproxy.config import OAuthSettings
from gdriveproxy.errors import (
    AuthFailedError,
    AuthNetworkError,
    SessionExpiredError,
)
from gdriveproxy.util.time import to_epoch_ms

from .auth_info import TokenSet, UserInfo

logger = logging.getLogger(__name__)

TOKEN_URI: str = "https://oauth2.googleapis.com/token"
REVOKE_URI: str = "https://oauth2.googleapis.com/revoke"

# Used when Google does not report an expiry.
DEFAULT_TOKEN_LIFETIME_MS: int = 3600 * 1000


@dataclass(frozen=True)
class PKCEParams:
    code_verifier: str
    code_challenge: str


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def code_challenge_for(code_verifier: str) -> str:
    """S256 challenge: base64url(sha256(verifier)) without padding."""
    return _b64url(hashlib.sha256(code_verifier.encode("ascii")).digest())


def generate_pkce() -> PKCEParams:
    """Generate a PKCE verifier and its S256 challenge."""
    verifier = _b64url(secrets.token_bytes(32))
    return PKCEParams(code_verifier=verifier, code_challenge=code_challenge_for(verifier))


class OAuthClient:
    """Talk to Google's OAuth endpoints on behalf of a web client."""

    def __init__(
        self,
        settings: OAuthSettings,
        *,
        http: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._http = http or requests.Session()
        self._clock = clock

    @property
    def settings(self) -> OAuthSettings:
        return self._settings

    def build_auth_url(self, state: str, code_verifier: str) -> str:
        """
        Return the consent-screen URL.

        Requests offline access (refresh token) and always shows consent so
        Google re-issues the refresh token.
        """
        flow = self._flow(code_verifier)
        url, _ = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            state=state,
            code_challenge=code_challenge_for(code_verifier),
            code_challenge_method="S256",
        )
        return url

    def exchange_code(self, code: str, code_verifier: str) -> TokenSet:
        """
        Exchange an authorization code for tokens.

        Raises:
            AuthNetworkError: if Google cannot be reached.
            AuthFailedError: on any other exchange failure.
        """
        if not code:
            raise AuthFailedError("Missing authorization code")

        flow = self._flow(code_verifier)
        try:
            flow.fetch_token(code=code)
        except requests.RequestException as exc:
            raise AuthNetworkError("Failed to reach the token endpoint", cause=exc) from exc
        except Exception as exc:
            logger.warning("Authorization code exchange failed: %s", exc)
            raise AuthFailedError(
                "Failed to exchange authorization code",
                details={"error": str(exc)},
                cause=exc,
            ) from exc

        creds = flow.credentials
        if not creds.token:
            raise AuthFailedError("No access token received")
        return self._token_set(creds, fallback_refresh_token="")

    def refresh(self, refresh_token: str) -> TokenSet:
        """
        Exchange a refresh token for a new access token.

        Raises:
            AuthNetworkError: if Google cannot be reached.
            SessionExpiredError: if Google refuses the refresh token.
        """
        creds = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=TOKEN_URI,
            client_id=self._settings.client_id,
            client_secret=self._settings.client_secret,
            scopes=list(self._settings.scopes),
        )
        try:
            creds.refresh(Request(session=self._http))
        except TransportError as exc:
            raise AuthNetworkError("Failed to reach the token endpoint", cause=exc) from exc
        except RefreshError as exc:
            raise SessionExpiredError("Failed to refresh access token", cause=exc) from exc

        if not creds.token:
            raise SessionExpiredError("Failed to refresh access token")
        return self._token_set(creds, fallback_refresh_token=refresh_token)

    def revoke(self, token: str) -> None:
        """Ask Google to revoke token."""
        try:
            resp = self._http.post(
                REVOKE_URI,
                data={"token": token},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=10,
            )
        except requests.RequestException as exc:
            raise AuthNetworkError("Failed to reach the revoke endpoint", cause=exc) from exc
        if resp.status_code != 200:
            raise AuthFailedError(
                "Token revocation was rejected",
                details={"status_code": resp.status_code},
            )

    def get_user_info(self, access_token: str) -> UserInfo:
        """
        Fetch the signed-in user's profile.

        Raises:
            SessionExpiredError: if the token is rejected.
            AuthNetworkError: if Google cannot be reached.
            AuthFailedError: on malformed or failed responses.
        """
        try:
            service = build(
                "oauth2",
                "v2",
                credentials=Credentials(token=access_token),
                cache_discovery=False,
            )
            data: dict[str, Any] = service.userinfo().get().execute()
        except HttpError as exc:
            if getattr(exc.resp, "status", None) == 401:
                raise SessionExpiredError("Access token expired or invalid", cause=exc) from exc
            raise AuthFailedError("Failed to get user info", cause=exc) from exc
        except (OSError, TransportError, httplib2.HttpLib2Error) as exc:
            raise AuthNetworkError("Failed to reach the userinfo endpoint", cause=exc) from exc

        user_id = data.get("id")
        email = data.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise AuthFailedError("Invalid user info received", details={"keys": sorted(data)})

        return UserInfo(
            id=user_id,
            email=email,
            name=data.get("name") or email,
            picture=data.get("picture") or "",
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _flow(self, code_verifier: str) -> Flow:
        if not self._settings.is_configured:
            raise AuthFailedError(
                "OAuth client is not configured",
                details={"hint": "Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET"},
            )
        return Flow.from_client_config(
            self._settings.client_config(),
            scopes=list(self._settings.scopes),
            redirect_uri=self._settings.redirect_uri,
            code_verifier=code_verifier,
            autogenerate_code_verifier=False,
        )

    def _token_set(self, creds: Credentials, *, fallback_refresh_token: str) -> TokenSet:
        if creds.expiry is not None:
            expires_at_ms = to_epoch_ms(creds.expiry)
        else:
            expires_at_ms = int(self._clock() * 1000) + DEFAULT_TOKEN_LIFETIME_MS
        return TokenSet(
            access_token=creds.token,
            refresh_token=creds.refresh_token or fallback_refresh_token,
            expires_at_ms=expires_at_ms,
        )

