"""Exception hierarchy and HTTP error mapping for gdriveproxy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Resource-domain error codes exposed at every boundary."""

    INVALID_LINK = "INVALID_LINK"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    NETWORK_ERROR = "NETWORK_ERROR"
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"
    API_ERROR = "API_ERROR"


class AuthErrorCode(str, Enum):
    """Auth-domain error codes."""

    AUTH_CANCELLED = "AUTH_CANCELLED"
    AUTH_FAILED = "AUTH_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"
    SESSION_EXPIRED = "SESSION_EXPIRED"


RETRYABLE_CODES: frozenset[ErrorCode] = frozenset(
    {ErrorCode.NETWORK_ERROR, ErrorCode.DOWNLOAD_FAILED}
)


class GDriveProxyError(Exception):
    """
    Base exception for gdriveproxy.

    Attributes:
        code: Tagged error kind; set per subclass.
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    code: Optional[ErrorCode] = None

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidLinkError(GDriveProxyError):
    """Raised when a locator or resource id cannot be used."""

    code = ErrorCode.INVALID_LINK


class FileNotFoundError(GDriveProxyError):
    """Raised when a Drive resource is not found (HTTP 404)."""

    code = ErrorCode.FILE_NOT_FOUND


class AccessDeniedError(GDriveProxyError):
    """Raised when access is denied (HTTP 401/403 non-quota)."""

    code = ErrorCode.ACCESS_DENIED
    requires_reauth: bool = False


class TokenRejectedError(AccessDeniedError):
    """Raised when Drive rejects a user's bearer token (HTTP 401 with a token)."""

    requires_reauth = True


class QuotaExceededError(GDriveProxyError):
    """Raised when quota or rate limits are hit (HTTP 403 quota reason, 429)."""

    code = ErrorCode.QUOTA_EXCEEDED


class NetworkError(GDriveProxyError):
    """Raised when network/timeout issues prevent the request."""

    code = ErrorCode.NETWORK_ERROR


class DownloadFailedError(GDriveProxyError):
    """Raised when a content stream breaks after the response started."""

    code = ErrorCode.DOWNLOAD_FAILED


class ApiError(GDriveProxyError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""

    code = ErrorCode.API_ERROR


class DownloadCancelledError(GDriveProxyError):
    """Raised inside a download when the task was cancelled by the caller."""


class AuthError(GDriveProxyError):
    """Base for OAuth failures; carries an AuthErrorCode instead of an ErrorCode."""

    auth_code: AuthErrorCode = AuthErrorCode.AUTH_FAILED


class AuthCancelledError(AuthError):
    """Raised when the user declined consent."""

    auth_code = AuthErrorCode.AUTH_CANCELLED


class AuthFailedError(AuthError):
    """Raised when the code exchange or user lookup fails."""

    auth_code = AuthErrorCode.AUTH_FAILED


class AuthNetworkError(AuthError):
    """Raised when the identity provider cannot be reached."""

    auth_code = AuthErrorCode.NETWORK_ERROR


class SessionExpiredError(AuthError):
    """Raised when a session token is expired and cannot be refreshed."""

    auth_code = AuthErrorCode.SESSION_EXPIRED


class NotAuthenticatedError(AuthError):
    """Raised when a strict call site finds no session token at all."""

    auth_code = AuthErrorCode.SESSION_EXPIRED


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdriveproxy exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None
    authenticated: bool = False


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "downloadQuotaExceeded",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GDriveProxyError:
    """
    Map an upstream HTTP error to a gdriveproxy exception.

    Policy:
        - 401 -> TokenRejectedError when a user token was sent,
                 AccessDeniedError otherwise
        - 403 -> AccessDeniedError, but QuotaExceededError if rate/quota related
        - 404 -> FileNotFoundError
        - 429 -> QuotaExceededError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
        "authenticated": info.authenticated,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        if info.authenticated:
            return TokenRejectedError(message, details=details, cause=cause)
        return AccessDeniedError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return AccessDeniedError(message, details=details, cause=cause)
    if info.status_code == 404:
        return FileNotFoundError(message, details=details, cause=cause)
    if info.status_code == 429:
        return QuotaExceededError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)


def classify_error(exc: BaseException) -> ErrorCode:
    """
    Return the tagged ErrorCode for an exception.

    gdriveproxy errors carry their own code. Anything else reaching this
    point escaped the gateway's classification: transport-level failures
    count as NETWORK_ERROR, the rest as API_ERROR.
    """
    code = getattr(exc, "code", None)
    if isinstance(code, ErrorCode):
        return code
    if isinstance(exc, AuthError):
        return ErrorCode.ACCESS_DENIED
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return ErrorCode.NETWORK_ERROR
    return ErrorCode.API_ERROR


def is_retryable_error(code: ErrorCode) -> bool:
    """Only network and generic stream failures are retried."""
    return code in RETRYABLE_CODES
