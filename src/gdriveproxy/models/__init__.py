"""Public model exports for gdriveproxy."""

from __future__ import annotations

from .download_task import TERMINAL_STATUSES, DownloadStatus, DownloadTask
from .file_info import FileDescriptor, FolderDescriptor, KnownMetadata
from .results import DownloadResult

__all__ = [
    "FileDescriptor",
    "FolderDescriptor",
    "KnownMetadata",
    "DownloadStatus",
    "DownloadTask",
    "TERMINAL_STATUSES",
    "DownloadResult",
]
