"""Tracked state of one download."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from gdriveproxy.errors import AppError
from gdriveproxy.util.time import now_utc


class DownloadStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES: frozenset[DownloadStatus] = frozenset(
    {DownloadStatus.COMPLETED, DownloadStatus.FAILED, DownloadStatus.CANCELLED}
)


@dataclass(slots=True)
class DownloadTask:
    """
    One tracked download.

    Notes:
        - progress_percent never decreases while IN_PROGRESS.
        - progress_percent is exactly 100 once COMPLETED.
        - A failure keeps the progress reached so far.
    """

    resource_id: str
    file_name: str
    status: DownloadStatus = DownloadStatus.PENDING
    progress_percent: float = 0.0
    speed_bytes_per_sec: float = 0.0
    last_error: Optional[AppError] = None
    retries: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def start(self) -> None:
        self.status = DownloadStatus.IN_PROGRESS
        self.progress_percent = 0.0
        self.speed_bytes_per_sec = 0.0
        self.last_error = None
        self.started_at = now_utc()
        self.finished_at = None

    def update_progress(self, percent: float, speed: float) -> bool:
        """
        Record a progress sample.

        Returns:
            True if the sample was applied (task is IN_PROGRESS).
        """
        if self.status is not DownloadStatus.IN_PROGRESS:
            return False
        self.progress_percent = min(100.0, max(self.progress_percent, percent))
        self.speed_bytes_per_sec = max(0.0, speed)
        return True

    def complete(self, file_name: str) -> None:
        self.file_name = file_name
        self.status = DownloadStatus.COMPLETED
        self.progress_percent = 100.0
        self.speed_bytes_per_sec = 0.0
        self.finished_at = now_utc()

    def fail(self, error: AppError) -> None:
        self.status = DownloadStatus.FAILED
        self.last_error = error
        self.speed_bytes_per_sec = 0.0
        self.finished_at = now_utc()

    def cancel(self) -> None:
        self.status = DownloadStatus.CANCELLED
        self.speed_bytes_per_sec = 0.0
        self.finished_at = now_utc()
