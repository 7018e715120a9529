"""
Record format for the entry log.

This module defines the binary layout of one entry on disk. A record is the
raw payload immediately followed by its length:

    Payload (variable) - Entry bytes, 0 to 65535 bytes
    Length (2 bytes)   - Unsigned little-endian length of the payload

The length sits after the payload so the log can be read backward from its
end one record at a time. There is no header, magic byte or checksum.
"""

import struct
from dataclasses import dataclass

TRAILER_FORMAT = "<H"
TRAILER_SIZE = struct.calcsize(TRAILER_FORMAT)
MAX_ENTRY_SIZE = 0xFFFF


class RecentLogError(Exception):
    """Base class for errors raised by the entry log."""
    pass


class EntryTooLarge(RecentLogError, ValueError):
    """Raised when an entry does not fit in the 16-bit length trailer."""

    def __init__(self, size: int):
        super().__init__(
            f"Entry of {size} bytes exceeds the maximum of {MAX_ENTRY_SIZE} bytes"
        )
        self.size = size


class MalformedLog(RecentLogError, ValueError):
    """Raised when a trailer does not describe a record inside the log."""
    pass


@dataclass
class Record:
    """
    A single entry as stored in the log.

    Attributes:
        payload: Entry bytes
    """

    payload: bytes

    def __post_init__(self) -> None:
        """Validate the payload."""
        if not isinstance(self.payload, (bytes, bytearray, memoryview)):
            raise TypeError(f"Payload must be bytes, got {type(self.payload)}")
        self.payload = bytes(self.payload)
        if len(self.payload) > MAX_ENTRY_SIZE:
            raise EntryTooLarge(len(self.payload))

    def serialize(self) -> bytes:
        """
        Serialize the record to bytes.

        Returns:
            Payload followed by its length trailer
        """
        return self.payload + struct.pack(TRAILER_FORMAT, len(self.payload))

    def size(self) -> int:
        """
        Calculate the serialized size of this record.

        Returns:
            Size in bytes
        """
        return len(self.payload) + TRAILER_SIZE


def encode(payload: bytes) -> bytes:
    """
    Encode one entry as a record.

    Args:
        payload: Entry bytes

    Returns:
        Serialized record

    Raises:
        EntryTooLarge: If the payload is longer than 65535 bytes
    """
    return Record(payload).serialize()


def decode_trailer(data: bytes) -> int:
    """
    Decode a length trailer.

    The result is not checked against the size of the file; that is left to
    the reader walking the log.

    Args:
        data: Exactly two bytes

    Returns:
        Payload length

    Raises:
        MalformedLog: If data is not exactly two bytes long
    """
    if len(data) != TRAILER_SIZE:
        raise MalformedLog(
            f"Trailer must be {TRAILER_SIZE} bytes, got {len(data)} bytes"
        )
    return struct.unpack(TRAILER_FORMAT, data)[0]
