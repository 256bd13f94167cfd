"""Vault <-> Todoist synchronization."""

from .codec import (
    attach_remote_id,
    fingerprint,
    parse_line,
    serialize_line,
    set_completed,
    strip_metadata,
)
from .engine import SyncEngine
from .scanner import parse_document, scan_all

__all__ = [
    "SyncEngine",
    "attach_remote_id",
    "fingerprint",
    "parse_document",
    "parse_line",
    "scan_all",
    "serialize_line",
    "set_completed",
    "strip_metadata",
]
