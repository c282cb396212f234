"""Line-oriented output sink."""

import io
import logging
import threading
from contextlib import nullcontext
from typing import Optional

from .errors import SerializationError
from .formats import TextFormatter
from .log import configure_package_logger

logger = logging.getLogger(__name__)

# Default for lock parameters: create a private lock.
OWN_LOCK = object()


class NullWriter:
    """Destination that accepts and discards everything."""

    def write(self, data) -> int:
        """Discard ``data`` and report it as written."""
        return len(data)

    def flush(self) -> None:
        """Do nothing."""

    def writable(self) -> bool:
        """Return True."""
        return True


class Sink:
    """Render records and write them, one flushed line at a time.

    The sink knows nothing about rotation. Its destination is any file-like
    object with ``write`` and ``flush``; text streams receive ``str`` and
    everything else receives encoded bytes.
    """

    def __init__(
        self,
        destination=None,
        *,
        formatter: Optional[logging.Formatter] = None,
        terminator: str = "\n",
        encoding: str = "utf-8",
        lock=OWN_LOCK,
        debug: bool = False,
    ):
        """Initialize the sink.

        Args:
        ----
            destination: Output object; None means a NullWriter.
            formatter: Renders a record to text. Defaults to TextFormatter.
            terminator: Appended after every record; "" appends nothing.
            encoding: Encoding used for binary destinations.
            lock: A lock held around render, write and flush. Defaults to a
                  new lock; None when the caller serializes access itself.
            debug: Report failures on the diagnostic channel.

        """
        self.formatter = formatter or TextFormatter()
        self.terminator = terminator
        self.encoding = encoding
        self.lock = threading.Lock() if lock is OWN_LOCK else lock
        self._debug = False
        self.debug = debug
        self._writer = None
        self._text = False
        self.set_target(destination)

    @property
    def debug(self) -> bool:
        """Whether failures are reported on the diagnostic channel."""
        return self._debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self._debug = bool(value)
        if self._debug:
            configure_package_logger()

    @property
    def target(self):
        """The current destination."""
        return self._writer

    def set_target(self, destination) -> None:
        """Replace the destination.

        Bytes not yet flushed to the previous destination are abandoned; the
        owner only swaps targets between records.
        """
        self._writer = NullWriter() if destination is None else destination
        self._text = isinstance(self._writer, io.TextIOBase)

    def write(self, record: logging.LogRecord) -> None:
        """Render ``record``, append the terminator, write and flush.

        Raises
        ------
            SerializationError: If the formatter cannot render the record.
            OSError: If writing or flushing fails.

        """
        with self.lock if self.lock is not None else nullcontext():
            try:
                line = self.formatter.format(record)
            except Exception as e:
                if self.debug:
                    logger.error("Unable to read entry: %s", e)
                raise SerializationError(f"Unable to render record: {e}") from e

            data = line + self.terminator
            if not self._text:
                data = data.encode(self.encoding)

            try:
                self._writer.write(data)
            except OSError as e:
                if self.debug:
                    logger.error("Unable to write the content: %s", e)
                raise
            try:
                self._writer.flush()
            except OSError as e:
                if self.debug:
                    logger.error("Unable to flush the buffer: %s", e)
                raise
