"""Exceptions raised by PyRotating.

I/O failures (open, close, rename, delete, write, flush) are reported as the
builtin ``OSError`` and are not wrapped.
"""


class RotatingError(Exception):
    """Base class for PyRotating errors."""


class NotReadyError(RotatingError):
    """The underlying file is not open, so the record was dropped."""

    def __init__(self, filename=None):
        """Initialize the error with the file that is not open."""
        self.filename = filename
        if filename:
            message = f"Writer for {filename} is not ready to write"
        else:
            message = "Writer is not ready to write"
        super().__init__(message)


class SerializationError(RotatingError):
    """A log record could not be rendered to text."""
