"""
recentlog - a persistent most-recently-used cache of short entries.

Entries (usually filesystem paths) are appended to a single flat file and
read back newest first, with features including:
- Compact binary record format with a trailing length field
- Reverse reads that never scan the whole file
- Deduplicating compaction bounded by a stale-byte threshold
"""

__version__ = "0.1.0"

from recentlog.core.log import (
    EntryTooLarge,
    Log,
    LogCompactor,
    MalformedLog,
    RecentLogError,
    ReverseCursor,
)

__all__ = [
    "EntryTooLarge",
    "Log",
    "LogCompactor",
    "MalformedLog",
    "RecentLogError",
    "ReverseCursor",
]
