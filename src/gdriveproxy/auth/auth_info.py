"""Authentication state for one proxy session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class UserInfo:
    """Google account profile of the signed-in user."""

    id: str
    email: str
    name: str
    picture: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email, "name": self.name, "picture": self.picture}


@dataclass(frozen=True)
class TokenSet:
    """Tokens returned by a code exchange or refresh."""

    access_token: str
    refresh_token: str
    expires_at_ms: int

    def __post_init__(self) -> None:
        if not isinstance(self.access_token, str) or not self.access_token:
            raise ValueError("TokenSet.access_token must be a non-empty string")


@dataclass(frozen=True)
class TokenState:
    """
    Token state held once per session.

    Instances are immutable and replaced as a whole, so readers never see a
    mix of old and new fields. TokenState() is the signed-out state.

    Notes:
        - expires_at_ms None means the token does not expire.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at_ms: Optional[int] = None
    user: Optional[UserInfo] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.access_token is None
            and self.refresh_token is None
            and self.expires_at_ms is None
            and self.user is None
        )

    @classmethod
    def from_token_set(cls, tokens: TokenSet, user: Optional[UserInfo] = None) -> "TokenState":
        return cls(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token or None,
            expires_at_ms=tokens.expires_at_ms,
            user=user,
        )


@dataclass(frozen=True)
class PendingLogin:
    """Values stored at redirect time and checked when the callback arrives."""

    state: str
    code_verifier: str
