"""Tests for the line sink."""

import io
import logging

import pytest
from conftest import PlainFormatter, make_record

from pyrotating.errors import SerializationError
from pyrotating.sink import NullWriter, Sink


class BrokenFormatter(logging.Formatter):
    """Formatter that always fails."""

    def format(self, record):
        """Raise instead of rendering."""
        raise TypeError("cannot render")


class FailingWriter(io.RawIOBase):
    """Binary destination whose writes fail."""

    def writable(self):
        """Return True."""
        return True

    def write(self, data):
        """Fail with a disk error."""
        raise OSError(28, "No space left on device")


class CountingLock:
    """Lock that counts how often it is taken."""

    def __init__(self):
        """Initialize the counter."""
        self.acquired = 0

    def __enter__(self):
        """Count an acquisition."""
        self.acquired += 1
        return self

    def __exit__(self, *exc):
        """Release."""
        return False


class TestSink:
    """Test rendering and writing records."""

    def test_binary_destination(self):
        """Test bytes destinations receive encoded lines."""
        buffer = io.BytesIO()
        sink = Sink(buffer, formatter=PlainFormatter())
        sink.write(make_record("héllo"))
        sink.write(make_record("again"))
        assert buffer.getvalue() == "héllo\nagain\n".encode("utf-8")

    def test_text_destination(self):
        """Test text streams receive str."""
        stream = io.StringIO()
        sink = Sink(stream, formatter=PlainFormatter(), terminator="|")
        sink.write(make_record("a"))
        sink.write(make_record("b"))
        assert stream.getvalue() == "a|b|"

    def test_empty_terminator(self):
        """Test an empty terminator appends nothing."""
        buffer = io.BytesIO()
        sink = Sink(buffer, formatter=PlainFormatter(), terminator="")
        sink.write(make_record("a"))
        sink.write(make_record("b"))
        assert buffer.getvalue() == b"ab"

    def test_serialization_error(self):
        """Test a failing formatter raises SerializationError."""
        buffer = io.BytesIO()
        sink = Sink(buffer, formatter=BrokenFormatter())
        with pytest.raises(SerializationError) as excinfo:
            sink.write(make_record())
        assert isinstance(excinfo.value.__cause__, TypeError)
        assert buffer.getvalue() == b""

    def test_write_error_propagates(self):
        """Test I/O errors reach the caller unchanged."""
        sink = Sink(FailingWriter(), formatter=PlainFormatter())
        with pytest.raises(OSError):
            sink.write(make_record())

    def test_debug_reports_failures(self, capsys):
        """Test failures are reported on stderr when debugging."""
        sink = Sink(FailingWriter(), formatter=PlainFormatter(), debug=True)
        with pytest.raises(OSError):
            sink.write(make_record())
        assert "Unable to write the content" in capsys.readouterr().err

    def test_set_target(self):
        """Test records go to the new destination after a swap."""
        first, second = io.BytesIO(), io.BytesIO()
        sink = Sink(first, formatter=PlainFormatter())
        sink.write(make_record("one"))
        sink.set_target(second)
        sink.write(make_record("two"))
        assert first.getvalue() == b"one\n"
        assert second.getvalue() == b"two\n"

    def test_null_target(self):
        """Test None swaps in a NullWriter."""
        sink = Sink(None)
        assert isinstance(sink.target, NullWriter)
        sink.write(make_record())

    def test_lock_wraps_each_record(self):
        """Test the lock is taken once per record."""
        lock = CountingLock()
        sink = Sink(io.BytesIO(), lock=lock)
        sink.write(make_record())
        sink.write(make_record())
        assert lock.acquired == 2

    def test_without_lock(self):
        """Test a sink without a lock still writes."""
        buffer = io.BytesIO()
        sink = Sink(buffer, formatter=PlainFormatter(), lock=None)
        assert sink.lock is None
        sink.write(make_record("x"))
        assert buffer.getvalue() == b"x\n"


class TestNullWriter:
    """Test the discarding destination."""

    def test_discards(self):
        """Test writes report their full length."""
        writer = NullWriter()
        assert writer.write(b"abc") == 3
        assert writer.write("abcd") == 4
        writer.flush()
        assert writer.writable()
