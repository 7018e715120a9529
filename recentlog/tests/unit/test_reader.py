"""Tests for the reverse cursor."""

import tempfile
from pathlib import Path

import pytest

from recentlog.core.log.format import MAX_ENTRY_SIZE, MalformedLog
from recentlog.core.log.log import Log


class TestReverseCursor:
    """Test walking a log backward."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def log(self, temp_dir):
        """Open a log in the temporary directory."""
        log = Log(temp_dir / "history")
        yield log
        log.close()

    def test_empty_log_is_exhausted(self, log):
        """Test that a cursor over an empty log returns nothing."""
        cursor = log.reverse_cursor()

        assert cursor.position == 0
        assert cursor.exhausted()
        assert cursor.advance() is None

    def test_reverse_order(self, log):
        """Test that entries come back newest first."""
        for entry in (b"a", b"b", b"c"):
            log.append(entry)

        cursor = log.reverse_cursor()

        assert cursor.advance() == b"c"
        assert cursor.advance() == b"b"
        assert cursor.advance() == b"a"
        assert cursor.advance() is None

    def test_position_tracks_record_boundaries(self, log):
        """Test that the position moves one record at a time."""
        log.append(b"/")
        log.append(b"/bar")

        cursor = log.reverse_cursor()
        assert cursor.position == 9

        cursor.advance()
        assert cursor.position == 3

        cursor.advance()
        assert cursor.position == 0
        assert cursor.exhausted()

    def test_exhausted_cursor_stays_exhausted(self, log):
        """Test repeated advances after the start of the log."""
        log.append(b"only")

        cursor = log.reverse_cursor()
        cursor.advance()

        assert cursor.advance() is None
        assert cursor.advance() is None
        assert cursor.records_read == 1

    @pytest.mark.parametrize("size", [0, 1, 2, 255, 256, 4096, MAX_ENTRY_SIZE])
    def test_round_trip(self, log, size):
        """Test that one advance returns exactly the appended entry."""
        payload = bytes(i % 251 for i in range(size))
        log.append(payload)

        cursor = log.reverse_cursor()

        assert cursor.advance() == payload
        assert cursor.advance() is None

    def test_empty_entries_between_others(self, log):
        """Test empty records anywhere in the log, including first."""
        for entry in (b"", b"x", b"", b""):
            log.append(entry)

        assert list(log.reverse_cursor()) == [b"", b"", b"x", b""]

    def test_iteration(self, log):
        """Test iterating over all remaining entries."""
        entries = [f"/tmp/dir-{i}".encode() for i in range(20)]
        for entry in entries:
            log.append(entry)

        assert list(log.reverse_cursor()) == entries[::-1]

    def test_returned_entries_are_owned(self, log):
        """Test that earlier results are not overwritten by later reads."""
        log.append(b"first")
        log.append(b"second")

        cursor = log.reverse_cursor()
        newest = cursor.advance()
        older = cursor.advance()

        assert newest == b"second"
        assert older == b"first"

    def test_trailer_pointing_before_start(self, temp_dir):
        """Test that an oversized trailer raises MalformedLog."""
        path = temp_dir / "history"
        path.write_bytes(b"ab\x10\x00")

        with Log(path) as log:
            cursor = log.reverse_cursor()

            with pytest.raises(MalformedLog, match="starts before the beginning"):
                cursor.advance()

    def test_dangling_single_byte(self, temp_dir):
        """Test a log whose walk ends one byte short of a trailer."""
        path = temp_dir / "history"
        path.write_bytes(b"Zab\x02\x00")

        with Log(path) as log:
            cursor = log.reverse_cursor()

            assert cursor.advance() == b"ab"
            assert cursor.position == 1

            with pytest.raises(MalformedLog):
                cursor.advance()

    def test_file_shorter_than_trailer(self, temp_dir):
        """Test that a one byte file has nothing to read."""
        path = temp_dir / "history"
        path.write_bytes(b"\x00")

        with Log(path) as log:
            assert log.reverse_cursor().advance() is None

    def test_negative_position_rejected(self, log):
        """Test that the cursor cannot start before the log."""
        from recentlog.core.log.reader import ReverseCursor

        with pytest.raises(ValueError, match="Position must be non-negative"):
            ReverseCursor(log._fd, -1)
