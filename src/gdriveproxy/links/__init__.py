"""Public link parsing exports for gdriveproxy."""

from __future__ import annotations

from .parser import (
    DEFAULT_HOST,
    LinkParser,
    ResourceKind,
    ResourceReference,
    is_valid,
    is_valid_id,
    parse,
    reconstruct,
)

__all__ = [
    "DEFAULT_HOST",
    "LinkParser",
    "ResourceKind",
    "ResourceReference",
    "parse",
    "reconstruct",
    "is_valid",
    "is_valid_id",
]
