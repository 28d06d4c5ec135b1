"""Public auth exports for gdriveproxy."""

from __future__ import annotations

from .auth_info import PendingLogin, TokenSet, TokenState, UserInfo
from .oauth_client import OAuthClient, PKCEParams, code_challenge_for, generate_pkce
from .token_manager import (
    EXPIRY_BUFFER_MS,
    SessionData,
    SessionStore,
    TokenManager,
    is_expired,
)

__all__ = [
    "OAuthClient",
    "PKCEParams",
    "generate_pkce",
    "code_challenge_for",
    "TokenSet",
    "TokenState",
    "UserInfo",
    "PendingLogin",
    "SessionData",
    "SessionStore",
    "TokenManager",
    "EXPIRY_BUFFER_MS",
    "is_expired",
]
