"""Drive gateway exports for gdriveproxy."""

from __future__ import annotations

from .drive_gateway import DRIVE_API_BASE, GoogleDriveGateway
from .stream import ContentStream, content_disposition, parse_content_disposition

__all__ = [
    "GoogleDriveGateway",
    "ContentStream",
    "DRIVE_API_BASE",
    "content_disposition",
    "parse_content_disposition",
]
