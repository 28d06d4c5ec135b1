"""gdriveproxy public API."""

from __future__ import annotations

from gdriveproxy.auth import OAuthClient, SessionStore, TokenManager, TokenState, UserInfo
from gdriveproxy.config import OAuthSettings, ProxyConfig
from gdriveproxy.errors import (
    AccessDeniedError,
    ApiError,
    AppError,
    AuthError,
    AuthErrorCode,
    DownloadCancelledError,
    DownloadFailedError,
    ErrorCode,
    FileNotFoundError,
    GDriveProxyError,
    HttpErrorInfo,
    InvalidLinkError,
    NetworkError,
    QuotaExceededError,
    SessionExpiredError,
    TokenRejectedError,
    map_http_error,
)
from gdriveproxy.gateway import ContentStream, GoogleDriveGateway
from gdriveproxy.links import LinkParser, ResourceKind, ResourceReference
from gdriveproxy.models import (
    DownloadResult,
    DownloadStatus,
    DownloadTask,
    FileDescriptor,
    FolderDescriptor,
    KnownMetadata,
)
from gdriveproxy.orchestrator import DownloadOrchestrator
from gdriveproxy.retry import RetryController, RetryPolicy, RetryResult
from gdriveproxy.service import DownloadResponse, DriveProxyService, JsonResponse, LoginOutcome

__all__ = [
    # High-level
    "DriveProxyService",
    "DownloadOrchestrator",
    "GoogleDriveGateway",
    "LinkParser",
    "RetryController",
    # Config / Auth
    "ProxyConfig",
    "OAuthSettings",
    "OAuthClient",
    "SessionStore",
    "TokenManager",
    "TokenState",
    "UserInfo",
    # Models
    "ResourceKind",
    "ResourceReference",
    "FileDescriptor",
    "FolderDescriptor",
    "KnownMetadata",
    "DownloadStatus",
    "DownloadTask",
    "DownloadResult",
    "RetryPolicy",
    "RetryResult",
    "ContentStream",
    "DownloadResponse",
    "JsonResponse",
    "LoginOutcome",
    # Errors
    "ErrorCode",
    "AuthErrorCode",
    "AppError",
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
    "SessionExpiredError",
    "HttpErrorInfo",
    "map_http_error",
]
