"""
Entry log backed by a single append-only file.

The log owns one open file descriptor. Entries are appended at the end of
the file and read back newest first through a reverse cursor.
"""

import os
from pathlib import Path
from typing import List, Optional, Union

from recentlog.core.log.compaction import LogCompactor, Value
from recentlog.core.log.format import TRAILER_SIZE, MalformedLog, Record
from recentlog.core.log.reader import ReverseCursor
from recentlog.utils.logging import get_logger

logger = get_logger(__name__)

_datasync = getattr(os, "fdatasync", os.fsync)


class Log:
    """
    Append-only log of short entries stored in one file.

    The log file is a concatenation of records (see ``format``). Opening a
    log never checks that the file is well formed; use ``verify`` for that.

    Attributes:
        path: Path to the log file
        compactor: Policy used by ``recent`` and ``compact``
    """

    def __init__(
        self,
        path: Union[str, Path],
        compaction_threshold_bytes: int = 65536,
        encoding: Optional[str] = "utf-8",
    ):
        """
        Open a log, creating the file and its parent directories if missing.

        Args:
            path: Path to the log file
            compaction_threshold_bytes: Stale bytes tolerated by ``recent``
                before the log is rewritten
            encoding: Text encoding entries must decode with, or None for
                raw bytes

        Raises:
            OSError: If the directory or file cannot be created or opened
        """
        self.path = Path(path)
        self.compactor = LogCompactor(
            threshold_bytes=compaction_threshold_bytes,
            encoding=encoding,
        )

        self.path.parent.mkdir(parents=True, exist_ok=True)

        self._fd: Optional[int] = os.open(
            self.path,
            os.O_RDWR | os.O_CREAT | os.O_APPEND,
            0o644,
        )

        logger.info(
            "Opened log",
            path=str(self.path),
            size=self.size(),
            compaction_threshold_bytes=compaction_threshold_bytes,
        )

    def _require_open(self) -> int:
        if self._fd is None:
            raise ValueError(f"Log is closed: {self.path}")
        return self._fd

    def append(self, entry: bytes) -> None:
        """
        Append an entry at the end of the log.

        The write is not durable until ``sync`` is called.

        Args:
            entry: Entry bytes

        Raises:
            EntryTooLarge: If the entry is longer than 65535 bytes
            OSError: If the write fails
        """
        fd = self._require_open()

        data = Record(entry).serialize()

        bytes_written = os.write(fd, data)

        if bytes_written != len(data):
            raise IOError(
                f"Partial write: expected {len(data)} bytes, wrote {bytes_written} bytes"
            )

        logger.debug("Appended entry", size=len(entry), path=str(self.path))

    def clear(self) -> None:
        """Truncate the log to zero length."""
        fd = self._require_open()

        os.lseek(fd, 0, os.SEEK_SET)
        os.ftruncate(fd, 0)

        logger.info("Cleared log", path=str(self.path))

    def delete(self) -> None:
        """
        Remove the log file.

        The log is closed first; no further operation is valid afterwards.

        Raises:
            OSError: If the file cannot be removed
        """
        self.close()
        self.path.unlink()

        logger.info("Deleted log", path=str(self.path))

    def sync(self) -> None:
        """
        Force written entries to disk.

        Only file data is synced; metadata such as timestamps may lag.
        """
        _datasync(self._require_open())

    def position(self) -> int:
        """
        Get the current offset of the file descriptor.

        Returns:
            Offset in bytes
        """
        return os.lseek(self._require_open(), 0, os.SEEK_CUR)

    def size(self) -> int:
        """
        Get the current size of the log file.

        Returns:
            Size in bytes
        """
        return os.fstat(self._require_open()).st_size

    def reverse_cursor(self) -> ReverseCursor:
        """
        Create a cursor reading entries from newest to oldest.

        Returns:
            Cursor positioned after the last record
        """
        fd = self._require_open()
        size = self.size()

        if size < TRAILER_SIZE:
            os.lseek(fd, 0, os.SEEK_SET)
            return ReverseCursor(fd, 0)

        os.lseek(fd, size - TRAILER_SIZE, os.SEEK_SET)
        return ReverseCursor(fd, size)

    def recent(self, count: int) -> List[Value]:
        """
        Get the most recent distinct entries.

        Rewrites the log when the walk left more stale bytes behind than the
        compaction threshold allows.

        Args:
            count: Maximum number of entries

        Returns:
            Entries, most recent first
        """
        return self.compactor.recent(self, count)

    def compact(self, count: int) -> int:
        """
        Rewrite the log keeping only the most recent distinct entries.

        Args:
            count: Number of entries to keep

        Returns:
            Number of entries kept
        """
        window = self.compactor.collect(self, count)
        self.compactor.rewrite(self, window)
        return len(window)

    def verify(self) -> int:
        """
        Walk the whole log and check that every record is in bounds.

        Returns:
            Number of records in the log

        Raises:
            MalformedLog: If a record does not fit in the log
        """
        size = self.size()
        if 0 < size < TRAILER_SIZE:
            logger.error(
                "Log verification failed",
                path=str(self.path),
                size=size,
                error="file shorter than a trailer",
            )
            raise MalformedLog(
                f"Log of {size} bytes is too short to hold a record"
            )

        cursor = self.reverse_cursor()

        try:
            for _ in cursor:
                pass
        except MalformedLog as e:
            logger.error(
                "Log verification failed",
                path=str(self.path),
                position=cursor.position,
                records=cursor.records_read,
                error=str(e),
            )
            raise

        logger.info(
            "Verified log",
            path=str(self.path),
            records=cursor.records_read,
        )

        return cursor.records_read

    def closed(self) -> bool:
        """
        Check whether the file descriptor has been released.

        Returns:
            True if the log is closed or deleted
        """
        return self._fd is None

    def close(self) -> None:
        """Close the log file."""
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None
            logger.debug("Closed log", path=str(self.path))

    def __enter__(self) -> "Log":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        """String representation."""
        state = "closed" if self._fd is None else f"size={self.size()}"
        return f"Log(path={str(self.path)!r}, {state})"
