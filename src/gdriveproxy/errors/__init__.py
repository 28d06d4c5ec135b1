"""Public error exports for gdriveproxy."""

from __future__ import annotations

from .exceptions import (
    RETRYABLE_CODES,
    AccessDeniedError,
    ApiError,
    AuthCancelledError,
    AuthError,
    AuthErrorCode,
    AuthFailedError,
    AuthNetworkError,
    DownloadCancelledError,
    DownloadFailedError,
    ErrorCode,
    FileNotFoundError,
    GDriveProxyError,
    HttpErrorInfo,
    InvalidLinkError,
    NetworkError,
    NotAuthenticatedError,
    QuotaExceededError,
    SessionExpiredError,
    TokenRejectedError,
    classify_error,
    is_retryable_error,
    map_http_error,
)
from .messages import (
    AUTH_ERROR_MESSAGES,
    ERROR_MESSAGES,
    AppError,
    AuthErrorInfo,
    can_retry_auth,
    create_app_error,
    get_auth_error_info,
    get_error_info,
    is_login_required_error,
    is_relogin_required,
    parse_auth_error_code,
    parse_error_code,
)

__all__ = [
    "ErrorCode",
    "AuthErrorCode",
    "RETRYABLE_CODES",
    "GDriveProxyError",
    "InvalidLinkError",
    "FileNotFoundError",
    "AccessDeniedError",
    "TokenRejectedError",
    "QuotaExceededError",
    "NetworkError",
    "DownloadFailedError",
    "ApiError",
    "DownloadCancelledError",
    "AuthError",
    "AuthCancelledError",
    "AuthFailedError",
    "AuthNetworkError",
    "SessionExpiredError",
    "NotAuthenticatedError",
    "HttpErrorInfo",
    "map_http_error",
    "classify_error",
    "is_retryable_error",
    "AppError",
    "AuthErrorInfo",
    "ERROR_MESSAGES",
    "AUTH_ERROR_MESSAGES",
    "get_error_info",
    "create_app_error",
    "get_auth_error_info",
    "is_login_required_error",
    "is_relogin_required",
    "can_retry_auth",
    "parse_error_code",
    "parse_auth_error_code",
]
