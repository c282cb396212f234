"""Shared fixtures for the PyRotating tests."""

import logging
import tempfile
from datetime import datetime

import pytest


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, when: datetime):
        """Start the clock at the local time ``when``."""
        self.now = when.timestamp()

    def __call__(self) -> float:
        """Return the current fake time."""
        return self.now

    def set(self, when: datetime) -> None:
        """Jump to the local time ``when``."""
        self.now = when.timestamp()

    def advance(self, seconds: float) -> None:
        """Move the clock forward."""
        self.now += seconds


def make_record(msg="This is a test.", level=logging.INFO, **extra):
    """Build a log record with optional extra fields."""
    record = logging.LogRecord("test", level, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class PlainFormatter(logging.Formatter):
    """Formatter that renders only the message, for predictable file content."""

    def __init__(self):
        """Initialize with a message-only format."""
        super().__init__("%(message)s")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield tmp_dir


@pytest.fixture
def clock():
    """A fake clock starting at noon on 2024-01-03, local time."""
    return FakeClock(datetime(2024, 1, 3, 12, 0, 0))
