"""Google Drive gateway: metadata and content for one resource reference."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, TypeVar

import httplib2
import requests
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gdriveproxy.errors import (
    ApiError,
    GDriveProxyError,
    HttpErrorInfo,
    InvalidLinkError,
    NetworkError,
    map_http_error,
)
from gdriveproxy.links import ResourceKind, ResourceReference
from gdriveproxy.models import FileDescriptor, FolderDescriptor, KnownMetadata
from gdriveproxy.util.mime import (
    DEFAULT_MIME,
    ensure_extension,
    export_mime_for,
    is_folder,
    needs_export,
)
from gdriveproxy.util.time import parse_rfc3339

from .fields import FILE_FIELDS, LIST_FIELDS, LIST_PAGE_SIZE
from .stream import ContentStream

T = TypeVar("T")

logger = logging.getLogger(__name__)

DRIVE_API_BASE: str = "https://www.googleapis.com/drive/v3"
DEFAULT_CHUNK_SIZE: int = 64 * 1024

ServiceFactory = Callable[[Optional[str]], Any]


class GoogleDriveGateway:
    """
    Drive access for one request at a time.

    Notes:
        - A user token, when given, authorizes the call; otherwise the shared
          API key is used.
        - No retries happen here; callers wrap calls in a RetryController.
        - Every failure leaves as a GDriveProxyError carrying its ErrorCode.
    """

    def __init__(
        self,
        api_key: str,
        *,
        http: Optional[requests.Session] = None,
        service_factory: Optional[ServiceFactory] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout_sec: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._http = http or requests.Session()
        self._service_factory = service_factory or self._build_service
        self._chunk_size = chunk_size
        self._timeout_sec = timeout_sec
        self._anonymous_service: Any = None

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        http: Optional[requests.Session] = None,
        api_key: str = "",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "GoogleDriveGateway":
        """Create gateway around a pre-built Drive service (useful for tests)."""
        return cls(
            api_key,
            http=http,
            service_factory=lambda _token: service,
            chunk_size=chunk_size,
        )

    # ----------------------------
    # Public API
    # ----------------------------
    def fetch_metadata(
        self,
        ref: ResourceReference,
        token: Optional[str] = None,
    ) -> FileDescriptor | FolderDescriptor:
        """
        Fetch metadata for ref.

        A folder (as reported by Drive) comes back as a FolderDescriptor with
        all direct, non-trashed members.

        Raises:
            InvalidLinkError: if ref is a folder link but Drive says file.
            FileNotFoundError, AccessDeniedError, QuotaExceededError,
            ApiError, NetworkError: as classified from the Drive response.
        """
        data = self._get_file_raw(ref.id, token)
        mime_type = data.get("mimeType") or DEFAULT_MIME

        if is_folder(mime_type):
            members = self.list_folder(ref.id, token)
            return FolderDescriptor(id=data["id"], name=data["name"], members=members)

        if ref.kind is ResourceKind.FOLDER:
            raise InvalidLinkError(
                "The provided ID is not a folder",
                details={"file_id": ref.id, "mime_type": mime_type},
            )
        return _file_dict_to_descriptor(data)

    def list_folder(self, folder_id: str, token: Optional[str] = None) -> list[FileDescriptor]:
        """List direct, non-trashed members of folder_id, following all pages."""
        service = self._service(token)
        q = f"'{folder_id}' in parents and trashed = false"
        members: list[FileDescriptor] = []
        page_token: Optional[str] = None

        while True:
            req = service.files().list(
                q=q,
                fields=LIST_FIELDS,
                pageSize=LIST_PAGE_SIZE,
                pageToken=page_token,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            )
            data = self._execute(req.execute, authenticated=token is not None)
            for f in data.get("files", []) or []:
                if isinstance(f, dict) and f.get("id") and f.get("name"):
                    members.append(_file_dict_to_descriptor(f))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return members

    def open_content_stream(
        self,
        ref: ResourceReference,
        known_metadata: Optional[KnownMetadata] = None,
        token: Optional[str] = None,
    ) -> ContentStream:
        """
        Open a byte stream for a file.

        known_metadata skips the metadata round-trip. Google-native documents
        are exported (see util.mime.EXPORT_MIMES) instead of fetched raw.

        Raises:
            InvalidLinkError: if ref points at a folder.
            NetworkError: if no response arrived.
            other GDriveProxyError: as classified from the Drive response.
        """
        if ref.kind is ResourceKind.FOLDER:
            raise InvalidLinkError("Folders cannot be streamed", details={"file_id": ref.id})

        if known_metadata is not None:
            if is_folder(known_metadata.mime_type):
                raise InvalidLinkError("Folders cannot be streamed", details={"file_id": ref.id})
            descriptor = FileDescriptor(
                id=ref.id,
                name=known_metadata.name,
                mime_type=known_metadata.mime_type,
                size_bytes=known_metadata.size_bytes,
            )
            upstream_name: Optional[str] = None
        else:
            descriptor = _file_dict_to_descriptor(self._get_file_raw(ref.id, token))
            if is_folder(descriptor.mime_type):
                raise InvalidLinkError("Folders cannot be streamed", details={"file_id": ref.id})
            upstream_name = descriptor.name

        if needs_export(descriptor.mime_type):
            export_mime = export_mime_for(descriptor.mime_type)
            url = f"{DRIVE_API_BASE}/files/{ref.id}/export"
            params: dict[str, str] = {"mimeType": export_mime}
            exported_name = ensure_extension(descriptor.name, export_mime)
            if upstream_name is not None:
                upstream_name = exported_name
            descriptor = FileDescriptor(
                id=descriptor.id,
                name=exported_name,
                mime_type=export_mime,
                size_bytes=0,
                modified_at=descriptor.modified_at,
            )
        else:
            url = f"{DRIVE_API_BASE}/files/{ref.id}"
            params = {"alt": "media", "supportsAllDrives": "true", "acknowledgeAbuse": "true"}

        headers: dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            params["key"] = self._api_key

        try:
            resp = self._http.get(
                url,
                params=params,
                headers=headers,
                stream=True,
                timeout=self._timeout_sec,
            )
        except requests.RequestException as exc:
            raise NetworkError("Network error", details={"file_id": ref.id}, cause=exc) from exc

        if resp.status_code >= 400:
            info = _response_to_info(resp, authenticated=token is not None)
            resp.close()
            err = map_http_error(info)
            _log_mapped(err, ref.id)
            raise err

        return ContentStream(
            resp,
            descriptor,
            content_type=descriptor.mime_type or resp.headers.get("Content-Type") or DEFAULT_MIME,
            content_length=_content_length(resp, descriptor),
            upstream_name=upstream_name,
            chunk_size=self._chunk_size,
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _build_service(self, token: Optional[str]) -> Any:
        if token:
            return build(
                "drive", "v3", credentials=Credentials(token=token), cache_discovery=False
            )
        if self._anonymous_service is None:
            self._anonymous_service = build(
                "drive", "v3", developerKey=self._api_key, cache_discovery=False
            )
        return self._anonymous_service

    def _service(self, token: Optional[str]) -> Any:
        try:
            return self._service_factory(token)
        except GDriveProxyError:
            raise
        except Exception as exc:
            raise ApiError("Failed to build Drive service", cause=exc) from exc

    def _get_file_raw(self, file_id: str, token: Optional[str]) -> dict[str, Any]:
        req = self._service(token).files().get(
            fileId=file_id,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        )
        data = self._execute(req.execute, authenticated=token is not None)
        if not isinstance(data, dict) or not data.get("id") or not data.get("name"):
            raise ApiError("Invalid file metadata received", details={"file_id": file_id})
        return data

    def _execute(self, func: Callable[[], T], *, authenticated: bool) -> T:
        try:
            return func()
        except Exception as exc:
            mapped = self._map_exception(exc, authenticated=authenticated)
            _log_mapped(mapped, None)
            raise mapped from exc

    def _map_exception(self, exc: Exception, *, authenticated: bool) -> GDriveProxyError:
        if isinstance(exc, GDriveProxyError):
            return exc
        if isinstance(exc, HttpError):
            return map_http_error(_http_error_to_info(exc, authenticated=authenticated), cause=exc)
        if isinstance(exc, (OSError, TimeoutError, httplib2.HttpLib2Error)):
            return NetworkError("Network error", cause=exc)
        return ApiError("Drive API error", cause=exc)


def _log_mapped(err: GDriveProxyError, file_id: Optional[str]) -> None:
    logger.warning(
        "Drive call failed: %s (status=%s reason=%s file_id=%s)",
        err.code.value if err.code else type(err).__name__,
        err.details.get("status_code"),
        err.details.get("reason"),
        file_id,
    )


def _content_length(resp: Any, descriptor: FileDescriptor) -> Optional[int]:
    header = resp.headers.get("Content-Length")
    if isinstance(header, str) and header.isdigit():
        return int(header)
    if descriptor.size_bytes > 0:
        return descriptor.size_bytes
    return None


def _file_dict_to_descriptor(data: dict[str, Any]) -> FileDescriptor:
    modified_at = None
    if isinstance(data.get("modifiedTime"), str):
        try:
            modified_at = parse_rfc3339(data["modifiedTime"])
        except ValueError:
            modified_at = None

    size = 0
    if isinstance(data.get("size"), str) and data["size"].isdigit():
        size = int(data["size"])
    elif isinstance(data.get("size"), int) and data["size"] >= 0:
        size = data["size"]

    icon = data.get("iconLink")
    mime_type = data.get("mimeType")
    return FileDescriptor(
        id=str(data.get("id", "")),
        name=str(data.get("name", "")),
        mime_type=mime_type if isinstance(mime_type, str) and mime_type else DEFAULT_MIME,
        size_bytes=size,
        modified_at=modified_at,
        icon_url=icon if isinstance(icon, str) else None,
    )


def _error_payload_to_info(
    status_code: Any,
    reason: Any,
    content: Any,
    *,
    authenticated: bool,
) -> HttpErrorInfo:
    message = None
    details: dict[str, Any] = {}

    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except ValueError:
            payload = None
        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                details["reason_detail"] = errors[0].get("reason")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
        authenticated=authenticated,
    )


def _http_error_to_info(exc: Any, *, authenticated: bool) -> HttpErrorInfo:
    resp = getattr(exc, "resp", None)
    return _error_payload_to_info(
        getattr(resp, "status", None),
        getattr(resp, "reason", None),
        getattr(exc, "content", None),
        authenticated=authenticated,
    )


def _response_to_info(resp: Any, *, authenticated: bool) -> HttpErrorInfo:
    try:
        content = resp.content
    except (requests.RequestException, OSError):
        content = None
    return _error_payload_to_info(
        resp.status_code,
        getattr(resp, "reason", None),
        content,
        authenticated=authenticated,
    )
