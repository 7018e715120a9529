"""
Core entry log implementation.

This package provides a single-file append-only log with:
- Binary record format with a little-endian length trailer
- Reverse cursor reading newest records first
- Deduplicating compaction of stale records
"""

from recentlog.core.log.compaction import LogCompactor, RecentWindow
from recentlog.core.log.format import (
    MAX_ENTRY_SIZE,
    TRAILER_SIZE,
    EntryTooLarge,
    MalformedLog,
    RecentLogError,
    Record,
    decode_trailer,
    encode,
)
from recentlog.core.log.log import Log
from recentlog.core.log.reader import ReverseCursor

__all__ = [
    "MAX_ENTRY_SIZE",
    "TRAILER_SIZE",
    "EntryTooLarge",
    "Log",
    "LogCompactor",
    "MalformedLog",
    "RecentLogError",
    "RecentWindow",
    "Record",
    "ReverseCursor",
    "decode_trailer",
    "encode",
]
