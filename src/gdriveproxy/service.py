"""DriveProxyService: the proxy endpoints as plain, framework-free methods."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlencode

from gdriveproxy.auth import (
    OAuthClient,
    PendingLogin,
    SessionStore,
    TokenManager,
    generate_pkce,
)
from gdriveproxy.config import ProxyConfig
from gdriveproxy.errors import (
    AuthCancelledError,
    AuthError,
    AuthErrorCode,
    AuthFailedError,
    ErrorCode,
    GDriveProxyError,
    NotAuthenticatedError,
    TokenRejectedError,
    classify_error,
    create_app_error,
    get_auth_error_info,
)
from gdriveproxy.gateway import ContentStream, GoogleDriveGateway
from gdriveproxy.links import ResourceKind, ResourceReference, is_valid_id
from gdriveproxy.models import FolderDescriptor, KnownMetadata
from gdriveproxy.orchestrator import DownloadOrchestrator
from gdriveproxy.retry import RetryController
from gdriveproxy.util.ids import new_oauth_state, new_session_id

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_LINK: 400,
    ErrorCode.FILE_NOT_FOUND: 404,
    ErrorCode.ACCESS_DENIED: 403,
    ErrorCode.QUOTA_EXCEEDED: 429,
    ErrorCode.NETWORK_ERROR: 502,
    ErrorCode.DOWNLOAD_FAILED: 502,
    ErrorCode.API_ERROR: 500,
}

NOT_AUTHENTICATED: str = "NOT_AUTHENTICATED"
JSON_HEADERS: dict[str, str] = {"Content-Type": "application/json"}


@dataclass(slots=True)
class JsonResponse:
    """A JSON body plus the HTTP status an endpoint would answer with."""

    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code < 400


@dataclass(slots=True)
class DownloadResponse:
    """
    Response of the download endpoint.

    On success stream is set and body is None; on failure the reverse.
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    stream: Optional[ContentStream] = None
    body: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class LoginOutcome:
    redirect_url: str
    success: bool
    error_code: Optional[AuthErrorCode] = None


def status_for(exc: GDriveProxyError) -> int:
    if isinstance(exc, TokenRejectedError):
        return 401
    return STATUS_BY_CODE[classify_error(exc)]


def error_envelope(code: ErrorCode) -> dict[str, Any]:
    return {"success": False, "error": create_app_error(code).to_dict()}


def auth_error_envelope(code: AuthErrorCode) -> dict[str, Any]:
    return {"success": False, "error": get_auth_error_info(code).to_dict()}


class DriveProxyService:
    """
    Proxy endpoints over one shared gateway and one session store.

    Notes:
        - Resource endpoints use the session's token when there is one and
          fall back to the shared API key otherwise.
        - Every failure becomes a JSON envelope; nothing raises to the caller.
    """

    def __init__(
        self,
        config: ProxyConfig,
        *,
        gateway: Optional[GoogleDriveGateway] = None,
        oauth_client: Optional[OAuthClient] = None,
        store: Optional[SessionStore] = None,
        retry: Optional[RetryController] = None,
    ) -> None:
        self._config = config
        self._gateway = gateway or GoogleDriveGateway(
            config.api_key,
            chunk_size=config.chunk_size,
            timeout_sec=config.request_timeout_sec,
        )
        self._oauth = oauth_client or OAuthClient(config.oauth)
        self._store = store or SessionStore()
        self._orchestrator = DownloadOrchestrator(self._gateway, retry)

    @property
    def config(self) -> ProxyConfig:
        return self._config

    @property
    def sessions(self) -> SessionStore:
        return self._store

    @property
    def orchestrator(self) -> DownloadOrchestrator:
        return self._orchestrator

    def open_session(self) -> str:
        """Create an empty session and return its id."""
        session_id = new_session_id()
        self._store.get_or_create(session_id)
        return session_id

    def token_manager(self, session_id: str) -> TokenManager:
        return TokenManager(self._oauth, self._store, session_id)

    # ----------------------------
    # Resource endpoints
    # ----------------------------
    def metadata(self, session_id: str, resource_id: str) -> JsonResponse:
        """Metadata of a file, or of a folder with its members."""
        ref = _reference(resource_id, ResourceKind.FILE)
        if ref is None:
            return JsonResponse(400, error_envelope(ErrorCode.INVALID_LINK))

        try:
            descriptor = self._orchestrator.fetch_metadata(ref, self._token(session_id))
        except GDriveProxyError as exc:
            return self._resource_error(exc, resource_id)
        return JsonResponse(200, {"success": True, "data": descriptor.to_dict()})

    def folder_files(self, session_id: str, folder_id: str) -> JsonResponse:
        """Direct members of a folder with the folder's total size."""
        ref = _reference(folder_id, ResourceKind.FOLDER)
        if ref is None:
            return JsonResponse(400, error_envelope(ErrorCode.INVALID_LINK))

        try:
            descriptor = self._orchestrator.fetch_metadata(ref, self._token(session_id))
        except GDriveProxyError as exc:
            return self._resource_error(exc, folder_id)
        if not isinstance(descriptor, FolderDescriptor):
            return JsonResponse(400, error_envelope(ErrorCode.INVALID_LINK))
        return JsonResponse(200, {"success": True, "data": descriptor.to_listing_dict()})

    def download(
        self,
        session_id: str,
        resource_id: str,
        *,
        name: Optional[str] = None,
        mime_type: Optional[str] = None,
        size: Optional[str | int] = None,
    ) -> DownloadResponse:
        """
        Open the content of a file for streaming to the client.

        name, mime_type and size are optional hints; when all three are
        given the metadata lookup is skipped. The caller must close the
        returned stream.
        """
        ref = _reference(resource_id, ResourceKind.FILE)
        if ref is None:
            return DownloadResponse(
                400, dict(JSON_HEADERS), body=error_envelope(ErrorCode.INVALID_LINK)
            )

        known = KnownMetadata.from_query(name, mime_type, size)
        try:
            stream = self._gateway.open_content_stream(ref, known, self._token(session_id))
        except GDriveProxyError as exc:
            err = self._resource_error(exc, resource_id)
            return DownloadResponse(err.status_code, dict(JSON_HEADERS), body=err.body)

        logger.info("Streaming %s (%s)", resource_id, stream.content_type)
        return DownloadResponse(200, stream.response_headers(), stream=stream)

    # ----------------------------
    # Auth endpoints
    # ----------------------------
    def begin_login(self, session_id: str) -> JsonResponse:
        """Start the OAuth flow; returns the consent-screen URL."""
        pkce = generate_pkce()
        state = new_oauth_state()
        try:
            auth_url = self._oauth.build_auth_url(state, pkce.code_verifier)
        except AuthError as exc:
            logger.error("Failed to generate auth URL: %s", exc)
            return JsonResponse(500, auth_error_envelope(AuthErrorCode.AUTH_FAILED))

        self._store.get_or_create(session_id).pending_login = PendingLogin(
            state=state, code_verifier=pkce.code_verifier
        )
        return JsonResponse(200, {"authUrl": auth_url})

    def complete_login(
        self,
        session_id: str,
        *,
        code: Optional[str] = None,
        state: Optional[str] = None,
        error: Optional[str] = None,
    ) -> LoginOutcome:
        """
        Handle the OAuth callback and redirect back to the frontend.

        error, state and the stored verifier are checked before any token
        exchange is attempted. The pending login is consumed only on success.
        """
        data = self._store.get_or_create(session_id)
        pending = data.pending_login

        try:
            if error:
                raise AuthCancelledError("User declined consent", details={"error": error})
            if pending is None or not state or not _same_state(state, pending.state):
                raise AuthFailedError("Invalid state")
            if not pending.code_verifier:
                raise AuthFailedError("Missing code verifier")
            if not code:
                raise AuthFailedError("Missing authorization code")

            tokens = self._oauth.exchange_code(code, pending.code_verifier)
            user = self._oauth.get_user_info(tokens.access_token)
        except AuthError as exc:
            logger.warning("OAuth callback failed for session %s: %s", session_id, exc)
            return self._login_redirect(exc.auth_code)

        data.pending_login = None
        self.token_manager(session_id).store_tokens(tokens, user)
        logger.info("Session %s signed in as %s", session_id, user.email)
        return self._login_redirect(None)

    def refresh(self, session_id: str) -> JsonResponse:
        """Force a token refresh; a failure signs the session out."""
        try:
            self.token_manager(session_id).refresh()
        except AuthError:
            return JsonResponse(401, auth_error_envelope(AuthErrorCode.SESSION_EXPIRED))
        return JsonResponse(200, {"success": True})

    def logout(self, session_id: str) -> JsonResponse:
        """Revoke (best-effort) and drop the session."""
        self.token_manager(session_id).logout()
        self._store.delete(session_id)
        return JsonResponse(200, {"success": True})

    def me(self, session_id: str) -> JsonResponse:
        """Profile of the signed-in user, refreshing an expiring token first."""
        manager = self.token_manager(session_id)
        user = manager.state.user
        try:
            if user is None:
                raise NotAuthenticatedError("Not authenticated")
            manager.require_token()
        except NotAuthenticatedError:
            return JsonResponse(
                401,
                {
                    "success": False,
                    "error": {"code": NOT_AUTHENTICATED, "message": "Not authenticated"},
                },
            )
        except AuthError:
            return JsonResponse(401, auth_error_envelope(AuthErrorCode.SESSION_EXPIRED))
        return JsonResponse(200, {"user": user.to_dict(), "isAuthenticated": True})

    # ----------------------------
    # Internals
    # ----------------------------
    def _token(self, session_id: str) -> Optional[str]:
        return self.token_manager(session_id).current_token()

    def _resource_error(self, exc: GDriveProxyError, resource_id: str) -> JsonResponse:
        code = classify_error(exc)
        status = status_for(exc)
        if status >= 500:
            logger.error("Request for %s failed: %s (%s)", resource_id, code.value, exc)
        else:
            logger.info("Request for %s failed: %s", resource_id, code.value)
        body = error_envelope(code)
        if isinstance(exc, TokenRejectedError):
            body["error"]["requiresReauth"] = True
        return JsonResponse(status, body)

    def _login_redirect(self, code: Optional[AuthErrorCode]) -> LoginOutcome:
        if code is None:
            query = urlencode({"auth_success": "true"})
        else:
            query = urlencode({"auth_error": code.value})
        return LoginOutcome(
            redirect_url=f"{self._config.frontend_url}?{query}",
            success=code is None,
            error_code=code,
        )


def _same_state(received: str, expected: str) -> bool:
    return secrets.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


def _reference(resource_id: str, kind: ResourceKind) -> Optional[ResourceReference]:
    if not is_valid_id(resource_id):
        return None
    return ResourceReference(kind=kind, id=resource_id, original_locator=resource_id)
