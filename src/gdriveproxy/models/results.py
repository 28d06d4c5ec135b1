"""Result models for downloads."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from gdriveproxy.errors import AppError


@dataclass(slots=True)
class DownloadResult:
    """Outcome of a single-file download."""

    resource_id: str
    success: bool
    content: Optional[bytes] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    error: Optional[AppError] = None
    cancelled: bool = False

    def save(self, directory: str, *, overwrite: bool = False) -> str:
        """
        Write the downloaded bytes into directory.

        Returns:
            The path written.

        Raises:
            ValueError: if the download did not succeed.
            FileExistsError: if the destination exists and overwrite is False.
        """
        if not self.success or self.content is None or not self.file_name:
            raise ValueError(f"Nothing to save: download of {self.resource_id} did not complete")

        local_path = os.path.join(directory, os.path.basename(self.file_name))
        if not overwrite and os.path.exists(local_path):
            raise FileExistsError(local_path)

        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(local_path, "wb") as f:
            f.write(self.content)
        return local_path
