"""User-facing messages and suggested actions for every error code."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import AuthErrorCode, ErrorCode


@dataclass(frozen=True)
class AppError:
    """An error as shown to the user."""

    code: ErrorCode
    message: str
    suggestion: str
    requires_login: bool = False

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code.value,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class AuthErrorInfo:
    """An auth error as shown to the user."""

    code: AuthErrorCode
    message: str
    suggestion: str
    can_retry: bool
    requires_relogin: bool

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code.value,
            "message": self.message,
            "suggestion": self.suggestion,
        }


ERROR_MESSAGES: dict[ErrorCode, AppError] = {
    ErrorCode.INVALID_LINK: AppError(
        ErrorCode.INVALID_LINK,
        "The link is not valid. Make sure it comes from Google Drive.",
        "Copy the share link from Google Drive and paste it again.",
    ),
    ErrorCode.FILE_NOT_FOUND: AppError(
        ErrorCode.FILE_NOT_FOUND,
        "File not found. It may have been deleted or made private.",
        "If the file is private, sign in with a Google account that can open it.",
        requires_login=True,
    ),
    ErrorCode.ACCESS_DENIED: AppError(
        ErrorCode.ACCESS_DENIED,
        "This file is private or requires permission to access.",
        "Sign in with a Google account to access private files.",
        requires_login=True,
    ),
    ErrorCode.QUOTA_EXCEEDED: AppError(
        ErrorCode.QUOTA_EXCEEDED,
        "The Google Drive download quota has been exceeded.",
        "Try again in a few hours or use a different account.",
    ),
    ErrorCode.NETWORK_ERROR: AppError(
        ErrorCode.NETWORK_ERROR,
        "The network connection failed.",
        "Check your internet connection and try again.",
    ),
    ErrorCode.DOWNLOAD_FAILED: AppError(
        ErrorCode.DOWNLOAD_FAILED,
        "The download failed.",
        "Use the retry action to try again.",
    ),
    ErrorCode.API_ERROR: AppError(
        ErrorCode.API_ERROR,
        "Google Drive returned a server error.",
        "Try again in a moment.",
    ),
}

AUTH_ERROR_MESSAGES: dict[AuthErrorCode, AuthErrorInfo] = {
    AuthErrorCode.AUTH_CANCELLED: AuthErrorInfo(
        AuthErrorCode.AUTH_CANCELLED,
        "Sign-in was cancelled.",
        "Use the sign-in button to try again.",
        can_retry=True,
        requires_relogin=False,
    ),
    AuthErrorCode.AUTH_FAILED: AuthErrorInfo(
        AuthErrorCode.AUTH_FAILED,
        "Authentication failed.",
        "Something went wrong while signing in. Please try again.",
        can_retry=True,
        requires_relogin=False,
    ),
    AuthErrorCode.NETWORK_ERROR: AuthErrorInfo(
        AuthErrorCode.NETWORK_ERROR,
        "Could not reach the sign-in service.",
        "Check your internet connection and try again.",
        can_retry=True,
        requires_relogin=False,
    ),
    AuthErrorCode.SESSION_EXPIRED: AuthErrorInfo(
        AuthErrorCode.SESSION_EXPIRED,
        "Your session has expired.",
        "Please sign in again to continue.",
        can_retry=False,
        requires_relogin=True,
    ),
}


def get_error_info(code: ErrorCode) -> AppError:
    return ERROR_MESSAGES[code]


def create_app_error(code: ErrorCode) -> AppError:
    """Alias kept for call sites that build an error for a task or envelope."""
    return get_error_info(code)


def get_auth_error_info(code: AuthErrorCode) -> AuthErrorInfo:
    return AUTH_ERROR_MESSAGES[code]


def is_login_required_error(code: ErrorCode) -> bool:
    return ERROR_MESSAGES[code].requires_login


def is_relogin_required(code: AuthErrorCode) -> bool:
    return AUTH_ERROR_MESSAGES[code].requires_relogin


def can_retry_auth(code: AuthErrorCode) -> bool:
    return AUTH_ERROR_MESSAGES[code].can_retry


def parse_error_code(value: str) -> Optional[ErrorCode]:
    """Return the ErrorCode named by value, or None."""
    try:
        return ErrorCode(value)
    except ValueError:
        return None


def parse_auth_error_code(value: str) -> Optional[AuthErrorCode]:
    """Return the AuthErrorCode named by value, or None."""
    try:
        return AuthErrorCode(value)
    except ValueError:
        return None
