"""DownloadOrchestrator: drives downloads through the gateway with retries."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from gdriveproxy.errors import (
    ApiError,
    DownloadCancelledError,
    ErrorCode,
    GDriveProxyError,
    TokenRejectedError,
    create_app_error,
)
from gdriveproxy.gateway import ContentStream, GoogleDriveGateway
from gdriveproxy.links import ResourceKind, ResourceReference, is_valid_id
from gdriveproxy.models import (
    DownloadResult,
    DownloadStatus,
    DownloadTask,
    FileDescriptor,
    FolderDescriptor,
    KnownMetadata,
)
from gdriveproxy.retry import RetryController
from gdriveproxy.util.mime import (
    DEFAULT_MIME,
    base_mime,
    ensure_extension,
    is_folder,
    mime_type_for_name,
)

logger = logging.getLogger(__name__)

ProgressListener = Callable[[DownloadTask], None]

# Minimum wall-clock gap between two speed/progress samples.
FLUSH_INTERVAL_SEC: float = 0.1


@dataclass
class _Payload:
    content: bytes
    file_name: str
    mime_type: str


@dataclass
class _Control:
    cancelled: threading.Event = field(default_factory=threading.Event)
    stream: Optional[ContentStream] = None
    current_member: Optional[str] = None
    lock: threading.Lock = field(default_factory=threading.Lock)

    def attach(self, stream: ContentStream) -> None:
        with self.lock:
            self.stream = stream
            if self.cancelled.is_set():
                stream.close()

    def cancel(self) -> None:
        with self.lock:
            self.cancelled.set()
            if self.stream is not None:
                self.stream.close()


def download_operation_id(resource_id: str) -> str:
    return f"download-{resource_id}"


def metadata_operation_id(resource_id: str) -> str:
    return f"metadata-{resource_id}"


def resolve_file_name(
    upstream_name: Optional[str],
    expected_name: Optional[str],
    resource_id: str,
    content_type: str,
) -> str:
    """
    Pick the final file name.

    Drive's name wins only when Drive supplied one; then the caller's
    expected name; then a placeholder. An extension matching content_type
    is appended when no known extension is present.
    """
    name = upstream_name or expected_name or f"file-{resource_id}"
    return ensure_extension(name, content_type)


def aggregate_progress(tasks: dict[str, DownloadTask], resource_ids: Iterable[str]) -> float:
    """Arithmetic mean of member progress; untracked members count as 0."""
    ids = list(resource_ids)
    if not ids:
        return 0.0
    total = 0.0
    for rid in ids:
        task = tasks.get(rid)
        total += task.progress_percent if task is not None else 0.0
    return total / len(ids)


class DownloadOrchestrator:
    """
    Drive DownloadTasks to completion.

    Notes:
        - One task per resource id; starting a download again reuses it.
        - Folder members are downloaded one after another.
        - cancel() may be called from another thread.
    """

    def __init__(
        self,
        gateway: GoogleDriveGateway,
        retry: Optional[RetryController] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gateway = gateway
        self._retry = retry or RetryController()
        self._clock = clock
        self._tasks: dict[str, DownloadTask] = {}
        self._controls: dict[str, _Control] = {}
        self._lock = threading.Lock()

    @property
    def retry_controller(self) -> RetryController:
        return self._retry

    # ----------------------------
    # Task tracking
    # ----------------------------
    def get_task(self, resource_id: str) -> Optional[DownloadTask]:
        return self._tasks.get(resource_id)

    def tasks(self) -> list[DownloadTask]:
        return list(self._tasks.values())

    def aggregate_progress(self, resource_ids: Iterable[str]) -> float:
        return aggregate_progress(self._tasks, resource_ids)

    def clear_completed(self) -> list[str]:
        """Drop finished tasks (completed, failed, cancelled) and their retry state."""
        with self._lock:
            done = [rid for rid, t in self._tasks.items() if t.is_terminal]
            for rid in done:
                del self._tasks[rid]
                self._controls.pop(rid, None)
                self._retry.clear(download_operation_id(rid))
        return done

    def cancel(self, resource_id: str) -> bool:
        """
        Cancel a running download or a folder batch.

        Returns:
            True if something was running under resource_id.
        """
        control = self._controls.get(resource_id)
        if control is None:
            return False
        control.cancel()
        if control.current_member is not None:
            self.cancel(control.current_member)
        task = self._tasks.get(resource_id)
        if task is not None and not task.is_terminal:
            task.cancel()
        logger.info("Download %s cancelled", resource_id)
        return True

    # ----------------------------
    # Metadata
    # ----------------------------
    def fetch_metadata(
        self,
        ref: ResourceReference,
        token: Optional[str] = None,
    ) -> FileDescriptor | FolderDescriptor:
        """
        Fetch metadata with retries.

        Raises:
            GDriveProxyError: the classified error of the last attempt.
        """
        op_id = metadata_operation_id(ref.id)
        result = self._retry.execute_with_retry(
            op_id, lambda: self._gateway.fetch_metadata(ref, token)
        )
        if result.success:
            return result.data  # type: ignore[return-value]

        # Metadata lookups are per request; do not let exhaustion stick.
        self._retry.reset(op_id)
        exc = result.exception
        if isinstance(exc, GDriveProxyError):
            raise exc
        error = result.error or create_app_error(ErrorCode.API_ERROR)
        raise ApiError(
            error.message,
            details={"file_id": ref.id, "error_code": error.code.value},
            cause=exc,
        )

    # ----------------------------
    # Downloads
    # ----------------------------
    def download_file(
        self,
        resource_id: str,
        *,
        token: Optional[str] = None,
        expected_name: Optional[str] = None,
        known_metadata: Optional[KnownMetadata] = None,
        on_progress: Optional[ProgressListener] = None,
    ) -> DownloadResult:
        """
        Download one file into memory.

        The task moves Pending -> InProgress -> Completed | Failed | Cancelled.
        A failed task keeps the progress it reached and carries a message and
        a suggestion.
        """
        ref = self._file_ref(resource_id)
        task = self._track(resource_id, expected_name or known_metadata and known_metadata.name)
        control = _Control()
        self._controls[resource_id] = control

        task.start()
        _emit(on_progress, task)

        op_id = download_operation_id(resource_id)
        try:
            result = self._retry.execute_with_retry(
                op_id,
                lambda: self._fetch_once(
                    ref, task, control, token, expected_name, known_metadata, on_progress
                ),
                on_retry=lambda attempt, _delay_ms: setattr(task, "retries", attempt),
            )
        except DownloadCancelledError:
            if task.status is not DownloadStatus.CANCELLED:
                task.cancel()
            return DownloadResult(resource_id=resource_id, success=False, cancelled=True)
        finally:
            self._controls.pop(resource_id, None)

        task.retries = result.retries
        if result.success and result.data is not None:
            payload: _Payload = result.data
            task.complete(payload.file_name)
            _emit(on_progress, task)
            logger.info(
                "Downloaded %s as %r (%d bytes, %d retries)",
                resource_id,
                payload.file_name,
                len(payload.content),
                task.retries,
            )
            return DownloadResult(
                resource_id=resource_id,
                success=True,
                content=payload.content,
                file_name=payload.file_name,
                mime_type=payload.mime_type,
            )

        if control.cancelled.is_set():
            # A cancel that raced with a terminal failure still wins.
            self._retry.reset(op_id)
            if task.status is not DownloadStatus.CANCELLED:
                task.cancel()
            return DownloadResult(resource_id=resource_id, success=False, cancelled=True)

        error = result.error or create_app_error(ErrorCode.DOWNLOAD_FAILED)
        if isinstance(result.exception, TokenRejectedError):
            logger.warning("Download %s rejected the session token", resource_id)
        task.fail(error)
        _emit(on_progress, task)
        return DownloadResult(resource_id=resource_id, success=False, error=error)

    def retry(
        self,
        resource_id: str,
        *,
        token: Optional[str] = None,
        expected_name: Optional[str] = None,
        known_metadata: Optional[KnownMetadata] = None,
        on_progress: Optional[ProgressListener] = None,
    ) -> DownloadResult:
        """Reset the retry budget of a failed download and run it again."""
        self._retry.reset(download_operation_id(resource_id))
        return self.download_file(
            resource_id,
            token=token,
            expected_name=expected_name,
            known_metadata=known_metadata,
            on_progress=on_progress,
        )

    def download_folder(
        self,
        folder: FolderDescriptor,
        *,
        token: Optional[str] = None,
        on_progress: Optional[ProgressListener] = None,
    ) -> dict[str, DownloadResult]:
        """
        Download every member of folder in listing order, one at a time.

        A failing member does not stop the batch; only cancel(folder.id) does.
        Subfolders are skipped; only direct file members are downloaded.
        """
        control = _Control()
        self._controls[folder.id] = control
        results: dict[str, DownloadResult] = {}
        members = [m for m in folder.members if not is_folder(m.mime_type)]
        if len(members) < len(folder.members):
            logger.info(
                "Folder %s: skipping %d subfolder(s)",
                folder.id,
                len(folder.members) - len(members),
            )

        try:
            for member in members:
                if control.cancelled.is_set():
                    break
                control.current_member = member.id
                results[member.id] = self.download_file(
                    member.id,
                    token=token,
                    expected_name=member.name,
                    known_metadata=KnownMetadata(
                        name=member.name,
                        mime_type=member.mime_type,
                        size_bytes=member.size_bytes,
                    ),
                    on_progress=on_progress,
                )
        finally:
            control.current_member = None
            self._controls.pop(folder.id, None)

        failed = sum(1 for r in results.values() if not r.success)
        logger.info(
            "Folder %s: %d of %d members downloaded, %d failed",
            folder.id,
            len(results) - failed,
            len(members),
            failed,
        )
        return results

    # ----------------------------
    # Internals
    # ----------------------------
    def _file_ref(self, resource_id: str) -> ResourceReference:
        if not is_valid_id(resource_id):
            raise ValueError(f"Invalid resource id: {resource_id!r}")
        return ResourceReference(
            kind=ResourceKind.FILE, id=resource_id, original_locator=resource_id
        )

    def _track(self, resource_id: str, file_name: Optional[str]) -> DownloadTask:
        with self._lock:
            task = self._tasks.get(resource_id)
            if task is None:
                task = DownloadTask(resource_id=resource_id, file_name=file_name or resource_id)
                self._tasks[resource_id] = task
            elif file_name:
                task.file_name = file_name
            task.status = DownloadStatus.PENDING
            return task

    def _fetch_once(
        self,
        ref: ResourceReference,
        task: DownloadTask,
        control: _Control,
        token: Optional[str],
        expected_name: Optional[str],
        known_metadata: Optional[KnownMetadata],
        on_progress: Optional[ProgressListener],
    ) -> _Payload:
        if control.cancelled.is_set():
            raise DownloadCancelledError("Download cancelled")

        stream = self._gateway.open_content_stream(ref, known_metadata, token)
        control.attach(stream)
        try:
            total = stream.content_length
            chunks: list[bytes] = []
            received = 0
            last_time = self._clock()
            last_bytes = 0

            for chunk in stream.iter_chunks():
                chunks.append(chunk)
                received += len(chunk)

                now = self._clock()
                elapsed = now - last_time
                if elapsed >= FLUSH_INTERVAL_SEC:
                    speed = (received - last_bytes) / elapsed
                    percent = received / total * 100 if total else 0.0
                    if task.update_progress(percent, speed):
                        _emit(on_progress, task)
                    last_time = now
                    last_bytes = received

            if control.cancelled.is_set():
                raise DownloadCancelledError("Download cancelled")
        finally:
            stream.close()

        content_type = stream.content_type or DEFAULT_MIME
        file_name = resolve_file_name(stream.upstream_name, expected_name, ref.id, content_type)
        if base_mime(content_type) == DEFAULT_MIME:
            content_type = mime_type_for_name(file_name) or content_type
        return _Payload(content=b"".join(chunks), file_name=file_name, mime_type=content_type)


def _emit(listener: Optional[ProgressListener], task: DownloadTask) -> None:
    if listener is not None:
        listener(task)
