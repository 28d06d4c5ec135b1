"""Streaming file content and the headers that describe it."""

from __future__ import annotations

import re
from typing import Any, Iterator, Optional
from urllib.parse import quote, unquote

import requests

from gdriveproxy.errors import DownloadFailedError
from gdriveproxy.models import FileDescriptor

_FILENAME_STAR_RE = re.compile(r"filename\*=UTF-8''([^;]+)", re.IGNORECASE)
_FILENAME_QUOTED_RE = re.compile(r'filename="([^"]+)"', re.IGNORECASE)
_FILENAME_BARE_RE = re.compile(r"filename=([^;]+)", re.IGNORECASE)


def content_disposition(file_name: str) -> str:
    """attachment header carrying both the plain and the RFC 5987 form."""
    encoded = quote(file_name, safe="!~*'()")
    return f"attachment; filename=\"{encoded}\"; filename*=UTF-8''{encoded}"


def parse_content_disposition(header: Optional[str]) -> Optional[str]:
    """Extract the file name from a Content-Disposition header, or None."""
    if not header:
        return None
    for pattern in (_FILENAME_STAR_RE, _FILENAME_QUOTED_RE, _FILENAME_BARE_RE):
        m = pattern.search(header)
        if m:
            name = unquote(m.group(1).strip())
            return name or None
    return None


class ContentStream:
    """
    Byte stream of one Drive file.

    Notes:
        - upstream_name is set only when the name came from Drive, not from
          caller-supplied metadata.
        - close() may be called at any time, including from another thread
          while iter_chunks() is running; iteration then just stops.
    """

    def __init__(
        self,
        response: Any,
        descriptor: FileDescriptor,
        *,
        content_type: str,
        content_length: Optional[int],
        upstream_name: Optional[str],
        chunk_size: int,
    ) -> None:
        self._response = response
        self.descriptor = descriptor
        self.content_type = content_type
        self.content_length = content_length
        self.upstream_name = upstream_name
        self._chunk_size = chunk_size
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def iter_chunks(self) -> Iterator[bytes]:
        """
        Yield non-empty chunks until the body is exhausted or the stream closed.

        Raises:
            DownloadFailedError: if the connection breaks mid-body.
        """
        try:
            for chunk in self._response.iter_content(chunk_size=self._chunk_size):
                if self._closed:
                    return
                if chunk:
                    yield chunk
        except (requests.RequestException, OSError) as exc:
            if self._closed:
                return
            raise DownloadFailedError(
                "Content stream interrupted",
                details={"file_id": self.descriptor.id},
                cause=exc,
            ) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()

    def response_headers(self) -> dict[str, str]:
        """Headers a proxy response for this stream should carry."""
        headers = {
            "Content-Disposition": content_disposition(self.descriptor.name),
            "Content-Type": self.content_type,
        }
        if self.content_length:
            headers["Content-Length"] = str(self.content_length)
        return headers

    def __enter__(self) -> "ContentStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
