"""Data models for Drive items."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from gdriveproxy.util.time import to_rfc3339


@dataclass(slots=True)
class FileDescriptor:
    """Metadata of a single Drive file as returned by the gateway."""

    id: str
    name: str
    mime_type: str
    size_bytes: int
    modified_at: Optional[datetime] = None
    icon_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError("FileDescriptor.size_bytes must be >= 0")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "size": self.size_bytes,
            "modifiedTime": to_rfc3339(self.modified_at) if self.modified_at else None,
        }
        if self.icon_url:
            data["iconLink"] = self.icon_url
        return data


@dataclass(slots=True)
class FolderDescriptor:
    """
    Metadata of a Drive folder and its direct members.

    Notes:
        - members keep the order Drive listed them in (not sorted).
        - total_size_bytes defaults to the sum of member sizes.
    """

    id: str
    name: str
    members: list[FileDescriptor] = field(default_factory=list)
    total_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        if self.total_size_bytes is None:
            self.total_size_bytes = sum(m.size_bytes for m in self.members)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "files": [m.to_dict() for m in self.members],
            "totalSize": self.total_size_bytes,
        }

    def to_listing_dict(self) -> dict[str, Any]:
        return {
            "folderId": self.id,
            "folderName": self.name,
            "files": [m.to_dict() for m in self.members],
            "totalSize": self.total_size_bytes,
        }


@dataclass(frozen=True)
class KnownMetadata:
    """Metadata a caller already has, letting the gateway skip a round-trip."""

    name: str
    mime_type: str
    size_bytes: int

    @classmethod
    def from_query(
        cls,
        name: Optional[str],
        mime_type: Optional[str],
        size: Optional[str | int],
    ) -> Optional["KnownMetadata"]:
        """Build from optional query parameters; all three must be present."""
        if not name or not mime_type or size is None or size == "":
            return None
        try:
            size_bytes = int(size)
        except (TypeError, ValueError):
            return None
        if size_bytes < 0:
            return None
        return cls(name=name, mime_type=mime_type, size_bytes=size_bytes)
