"""Runtime configuration for gdriveproxy."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URI: str = "http://localhost:3001/api/auth/google/callback"
DEFAULT_FRONTEND_URL: str = "http://localhost:5173"

DEFAULT_SCOPES: tuple[str, ...] = (
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
)


@dataclass(frozen=True)
class OAuthSettings:
    """OAuth web-client settings."""

    client_id: str
    client_secret: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: tuple[str, ...] = DEFAULT_SCOPES

    def __post_init__(self) -> None:
        for key in ("client_id", "client_secret", "redirect_uri"):
            value = getattr(self, key)
            if not isinstance(value, str):
                raise TypeError(f"OAuthSettings.{key} must be a string")
        if not self.redirect_uri.strip():
            raise ValueError("OAuthSettings.redirect_uri must be a non-empty string")
        if not self.scopes or not all(isinstance(s, str) and s.strip() for s in self.scopes):
            raise ValueError("OAuthSettings.scopes must be a non-empty sequence of strings")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def client_config(self) -> dict[str, dict[str, object]]:
        """Client config in the shape google-auth-oauthlib expects for web apps."""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.redirect_uri],
            }
        }


@dataclass(frozen=True)
class ProxyConfig:
    """
    Proxy configuration.

    api_key is the shared credential used whenever a request carries no
    user token.
    """

    api_key: str
    oauth: OAuthSettings
    frontend_url: str = DEFAULT_FRONTEND_URL
    chunk_size: int = 64 * 1024
    request_timeout_sec: float = 60.0

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str):
            raise TypeError("ProxyConfig.api_key must be a string")
        if self.chunk_size <= 0:
            raise ValueError("ProxyConfig.chunk_size must be > 0")
        if self.request_timeout_sec <= 0:
            raise ValueError("ProxyConfig.request_timeout_sec must be > 0")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProxyConfig":
        """
        Build configuration from environment variables.

        Reads GOOGLE_API_KEY, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET,
        GOOGLE_REDIRECT_URI and FRONTEND_URL. Missing credentials are logged,
        not fatal: public downloads only need the API key and private ones
        only need OAuth.
        """
        env = os.environ if environ is None else environ

        api_key = env.get("GOOGLE_API_KEY", "")
        if not api_key:
            logger.warning("GOOGLE_API_KEY not set. Anonymous Drive calls will fail.")

        oauth = OAuthSettings(
            client_id=env.get("GOOGLE_CLIENT_ID", ""),
            client_secret=env.get("GOOGLE_CLIENT_SECRET", ""),
            redirect_uri=env.get("GOOGLE_REDIRECT_URI") or DEFAULT_REDIRECT_URI,
        )
        if not oauth.is_configured:
            logger.warning("GOOGLE_CLIENT_ID or GOOGLE_CLIENT_SECRET not set. OAuth will fail.")

        return cls(
            api_key=api_key,
            oauth=oauth,
            frontend_url=env.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL,
        )
