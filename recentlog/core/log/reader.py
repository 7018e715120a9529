"""
Reverse reader for walking the entry log from newest to oldest.

Each record stores its length after its payload, so the reader can hop from
the end of one record to the end of the previous one with a single seek and
never touches bytes outside the records it returns.
"""

import os
from typing import Iterator, Optional

from recentlog.core.log.format import TRAILER_SIZE, MalformedLog, decode_trailer
from recentlog.utils.logging import get_logger

logger = get_logger(__name__)


class ReverseCursor:
    """
    Backward cursor over the records of an open log file.

    The cursor position is always a record boundary: the end of the next
    record to be returned. It starts at the end of the file and reaches 0
    once the oldest record has been returned. It stops at the start of the
    payload just read rather than at the previous trailer, so an empty record
    at offset 0 is still returned and ``position`` counts exactly the bytes
    older than the last record read.

    The cursor shares the file descriptor of the log that created it and moves
    its offset, so the log should not be written while a walk is in progress.
    """

    def __init__(self, fd: int, position: int):
        """
        Initialize a reverse cursor.

        Args:
            fd: Open file descriptor of the log file
            position: Offset of the end of the newest record to return
        """
        if position < 0:
            raise ValueError(f"Position must be non-negative, got {position}")

        self._fd = fd
        self._position = position
        self._records_read = 0

    @property
    def position(self) -> int:
        """Number of bytes between the start of the log and the cursor."""
        return self._position

    @property
    def records_read(self) -> int:
        """Number of records returned so far."""
        return self._records_read

    def exhausted(self) -> bool:
        """
        Check whether every record has been returned.

        Returns:
            True if the cursor is at the start of the log
        """
        return self._position == 0

    def advance(self) -> Optional[bytes]:
        """
        Read the previous record.

        Returns:
            Payload of the previous record, or None if the cursor is exhausted

        Raises:
            MalformedLog: If the trailer describes a record outside the log
            OSError: If a seek or read fails
        """
        if self._position == 0:
            return None

        if self._position < TRAILER_SIZE:
            raise MalformedLog(
                f"Only {self._position} bytes left before trailer at "
                f"position {self._position}"
            )

        trailer_start = self._position - TRAILER_SIZE
        os.lseek(self._fd, trailer_start, os.SEEK_SET)
        length = decode_trailer(self._read_exact(TRAILER_SIZE, trailer_start))

        payload_start = trailer_start - length
        if payload_start < 0:
            raise MalformedLog(
                f"Record of {length} bytes ending at position {self._position} "
                f"starts before the beginning of the log"
            )

        os.lseek(self._fd, -TRAILER_SIZE - length, os.SEEK_CUR)
        payload = self._read_exact(length, payload_start)

        self._position = payload_start
        self._records_read += 1

        return payload

    def _read_exact(self, size: int, position: int) -> bytes:
        """Read exactly size bytes from the current offset."""
        chunks = []
        remaining = size

        while remaining > 0:
            chunk = os.read(self._fd, remaining)
            if not chunk:
                logger.error(
                    "Short read while walking log",
                    position=position,
                    expected=size,
                    got=size - remaining,
                )
                raise MalformedLog(
                    f"Expected {size} bytes at position {position}, "
                    f"got {size - remaining} bytes"
                )
            chunks.append(chunk)
            remaining -= len(chunk)

        return b"".join(chunks)

    def __iter__(self) -> Iterator[bytes]:
        """Yield remaining payloads from newest to oldest."""
        while True:
            payload = self.advance()
            if payload is None:
                return
            yield payload

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ReverseCursor(position={self._position}, "
            f"records_read={self._records_read})"
        )
