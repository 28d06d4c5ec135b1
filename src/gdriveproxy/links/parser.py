"""Parse Google Drive share links into canonical resource references."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
from urllib.parse import parse_qs, urlsplit

DEFAULT_HOST: str = "drive.google.com"

_ID_RE = re.compile(r"[A-Za-z0-9_-]{10,44}")

# Paths are matched in full; query and fragment are split off beforehand.
_FILE_VIEW_RE = re.compile(r"^/file/d/(?P<id>[^/]+)/view/?$")
_FOLDER_RE = re.compile(r"^(?:/drive(?:/u/\d+)?)?/folders/(?P<id>[^/]+)/?$")
_OPEN_PATH = "/open"


class ResourceKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class ResourceReference:
    """
    Canonical reference to a Drive file or folder.

    Two references with the same id but different kinds are different
    resources until Drive itself says otherwise.
    """

    kind: ResourceKind
    id: str
    original_locator: str

    def __post_init__(self) -> None:
        if not is_valid_id(self.id):
            raise ValueError("ResourceReference.id must match [A-Za-z0-9_-]{10,44}")

    @property
    def is_folder(self) -> bool:
        return self.kind is ResourceKind.FOLDER


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and _ID_RE.fullmatch(value) is not None


class LinkParser:
    """Parser bound to one exact Drive host."""

    def __init__(self, host: str = DEFAULT_HOST) -> None:
        if not host or not isinstance(host, str):
            raise ValueError("host must be a non-empty string")
        self._host = host.lower()

    @property
    def host(self) -> str:
        return self._host

    def parse(self, locator: Any) -> Optional[ResourceReference]:
        """
        Parse a share link.

        Accepted shapes (exact host, http/https only):
            - /file/d/{id}/view[?...]
            - /open?id={id}[&...]
            - /drive/folders/{id}[?...] (also /folders/{id}, /drive/u/N/folders/{id})

        Returns:
            ResourceReference, or None for anything else.
        """
        if not isinstance(locator, str):
            return None
        trimmed = locator.strip()
        if not trimmed:
            return None

        try:
            parts = urlsplit(trimmed)
            port = parts.port
        except ValueError:
            return None

        if parts.scheme.lower() not in ("http", "https"):
            return None
        if port is not None or parts.username is not None or parts.password is not None:
            return None
        if (parts.hostname or "") != self._host:
            return None

        kind: Optional[ResourceKind] = None
        resource_id: Optional[str] = None

        m = _FILE_VIEW_RE.match(parts.path)
        if m:
            kind, resource_id = ResourceKind.FILE, m.group("id")
        elif parts.path == _OPEN_PATH:
            ids = parse_qs(parts.query).get("id")
            if ids:
                kind, resource_id = ResourceKind.FILE, ids[0]
        else:
            m = _FOLDER_RE.match(parts.path)
            if m:
                kind, resource_id = ResourceKind.FOLDER, m.group("id")

        if kind is None or not is_valid_id(resource_id):
            return None

        return ResourceReference(kind=kind, id=resource_id, original_locator=trimmed)  # type: ignore[arg-type]

    def reconstruct(self, ref: ResourceReference) -> str:
        """Return the canonical link for ref."""
        if ref.kind is ResourceKind.FILE:
            return f"https://{self._host}/file/d/{ref.id}/view"
        return f"https://{self._host}/drive/folders/{ref.id}"

    def is_valid(self, locator: Any) -> bool:
        return self.parse(locator) is not None

    def extract_file_id(self, locator: Any) -> Optional[str]:
        ref = self.parse(locator)
        if ref is None or ref.kind is not ResourceKind.FILE:
            return None
        return ref.id

    def extract_folder_id(self, locator: Any) -> Optional[str]:
        ref = self.parse(locator)
        if ref is None or ref.kind is not ResourceKind.FOLDER:
            return None
        return ref.id


_default_parser = LinkParser()


def parse(locator: Any) -> Optional[ResourceReference]:
    return _default_parser.parse(locator)


def reconstruct(ref: ResourceReference) -> str:
    return _default_parser.reconstruct(ref)


def is_valid(locator: Any) -> bool:
    return _default_parser.is_valid(locator)
