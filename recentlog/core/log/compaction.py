"""
Log compaction for keeping only the most recent distinct entries.

The log only ever grows on append, so repeated touches of the same entry
leave stale copies behind. Queries walk the log backward until they have
collected enough distinct entries; whatever lies before the point where the
walk stopped is no longer needed. When that stale prefix grows past a
threshold the log is rewritten with just the retained entries.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from recentlog.utils.logging import get_logger

if TYPE_CHECKING:
    from recentlog.core.log.log import Log

logger = get_logger(__name__)

Value = Union[str, bytes]


@dataclass
class RecentWindow:
    """
    Result of a backward walk over the log.

    Attributes:
        entries: Distinct raw payloads mapped to their decoded value,
            most recent first
        stale_bytes: Bytes of the log older than the oldest retained record
        records_read: Number of records the walk consumed
        skipped: Number of records that could not be decoded
    """

    entries: Dict[bytes, Value] = field(default_factory=OrderedDict)
    stale_bytes: int = 0
    records_read: int = 0
    skipped: int = 0

    def values(self) -> List[Value]:
        """
        Get decoded entries, most recent first.

        Returns:
            List of entries
        """
        return list(self.entries.values())

    def payloads(self) -> List[bytes]:
        """
        Get raw entries, most recent first.

        Returns:
            List of payloads
        """
        return list(self.entries.keys())

    def __len__(self) -> int:
        return len(self.entries)


class LogCompactor:
    """
    Derives the most recent distinct entries and rewrites the log.

    Compaction process:
    1. Walk the log backward collecting distinct entries
    2. Stop after the requested count or at the start of the log
    3. If the bytes behind the walk exceed the threshold, clear the log
    4. Append the retained entries oldest first and sync
    """

    def __init__(
        self,
        threshold_bytes: int = 65536,
        encoding: Optional[str] = "utf-8",
    ):
        """
        Initialize log compactor.

        Args:
            threshold_bytes: Stale bytes tolerated before rewriting the log
            encoding: Text encoding entries must decode with, or None to
                keep entries as raw bytes
        """
        if threshold_bytes < 0:
            raise ValueError(
                f"Threshold must be non-negative, got {threshold_bytes}"
            )

        self.threshold_bytes = threshold_bytes
        self.encoding = encoding

    def _decode(self, payload: bytes) -> Optional[Value]:
        if self.encoding is None:
            return payload
        try:
            return payload.decode(self.encoding)
        except UnicodeDecodeError:
            return None

    def collect(self, log: "Log", count: int) -> RecentWindow:
        """
        Collect the most recent distinct entries.

        An entry's rank is decided by its most recent occurrence. Entries that
        do not decode are consumed by the walk but never counted.

        Args:
            log: Log to walk
            count: Maximum number of distinct entries to collect

        Returns:
            Window of retained entries
        """
        if count < 0:
            raise ValueError(f"Count must be non-negative, got {count}")

        window = RecentWindow()
        cursor = log.reverse_cursor()

        while len(window.entries) < count:
            payload = cursor.advance()
            if payload is None:
                break

            if payload in window.entries:
                continue

            value = self._decode(payload)
            if value is None:
                window.skipped += 1
                logger.warning(
                    "Skipping undecodable entry",
                    position=cursor.position,
                    size=len(payload),
                    encoding=self.encoding,
                )
                continue

            window.entries[payload] = value

        window.stale_bytes = cursor.position
        window.records_read = cursor.records_read

        logger.debug(
            "Collected recent entries",
            requested=count,
            collected=len(window.entries),
            records_read=window.records_read,
            stale_bytes=window.stale_bytes,
        )

        return window

    def should_compact(self, window: RecentWindow) -> bool:
        """
        Determine if the log behind a window should be reclaimed.

        Args:
            window: Result of a previous walk

        Returns:
            True if the stale bytes exceed the threshold
        """
        return window.stale_bytes > self.threshold_bytes

    def rewrite(self, log: "Log", window: RecentWindow) -> None:
        """
        Replace the contents of the log with the entries of a window.

        The log is cleared first and then repopulated, so a failure part way
        through leaves it with fewer entries than before.

        Args:
            log: Log to rewrite
            window: Entries to keep
        """
        original_size = log.size()

        log.clear()
        for payload in reversed(window.payloads()):
            log.append(payload)
        log.sync()

        logger.info(
            "Compaction complete",
            path=str(log.path),
            retained=len(window),
            stale_bytes=window.stale_bytes,
            original_size=original_size,
            compacted_size=log.size(),
            space_saved=original_size - log.size(),
        )

    def recent(self, log: "Log", count: int) -> List[Value]:
        """
        Get the most recent distinct entries, compacting when worthwhile.

        Args:
            log: Log to query
            count: Maximum number of entries

        Returns:
            Entries, most recent first
        """
        window = self.collect(log, count)

        if self.should_compact(window):
            logger.info(
                "Compaction triggered by stale bytes",
                stale_bytes=window.stale_bytes,
                threshold=self.threshold_bytes,
            )
            self.rewrite(log, window)

        return window.values()
