"""Download orchestration exports for gdriveproxy."""

from __future__ import annotations

from .download_orchestrator import (
    FLUSH_INTERVAL_SEC,
    DownloadOrchestrator,
    ProgressListener,
    aggregate_progress,
    resolve_file_name,
)

__all__ = [
    "DownloadOrchestrator",
    "ProgressListener",
    "FLUSH_INTERVAL_SEC",
    "aggregate_progress",
    "resolve_file_name",
]
