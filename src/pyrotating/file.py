"""Open file lifecycle for log output."""

import logging
import os
import threading
from contextlib import nullcontext
from typing import Optional

from .errors import NotReadyError
from .sink import OWN_LOCK, Sink

logger = logging.getLogger(__name__)

DEFAULT_MODE = os.O_APPEND | os.O_CREAT | os.O_WRONLY
DEFAULT_PERM = 0o777


class FileHandle:
    """Own one open file and write records to it through a Sink.

    The handle is either open (``is_ready`` is True) or closed. It opens the
    file on construction and never reopens it on its own.
    """

    def __init__(
        self,
        filename: str,
        *,
        mode: int = DEFAULT_MODE,
        permission: int = DEFAULT_PERM,
        sink: Optional[Sink] = None,
        lock=OWN_LOCK,
        debug: bool = False,
    ):
        """Initialize the handle and open the file.

        Args:
        ----
            filename: Path of the file to write.
            mode: ``os.open`` flags.
            permission: Permission bits used when the file is created.
            sink: Sink to write through. A new unlocked Sink by default,
                  since the handle serializes access itself.
            lock: Lock held around every write and around open/close.
                  Defaults to a new lock; None leaves serialization to the
                  caller.
            debug: Report failures on the diagnostic channel.

        Raises:
        ------
            OSError: If the file cannot be opened.

        """
        self.filename = filename
        self.sink = sink if sink is not None else Sink(lock=None)
        self.lock = threading.Lock() if lock is OWN_LOCK else lock
        self._mode = mode
        self._permission = permission
        self._debug = False
        self._file = None
        self._ready = False
        self.debug = debug
        self.open()

    @property
    def is_ready(self) -> bool:
        """True while the file is open."""
        return self._ready

    @property
    def mode(self) -> int:
        """The ``os.open`` flags used for the file."""
        return self._mode

    @property
    def permission(self) -> int:
        """The permission bits used when the file is created."""
        return self._permission

    @property
    def debug(self) -> bool:
        """Whether failures are reported on the diagnostic channel."""
        return self._debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self._debug = bool(value)
        self.sink.debug = self._debug

    def _locked(self):
        return self.lock if self.lock is not None else nullcontext()

    def open(self) -> None:
        """Open the file and point the sink at it.

        Does nothing if the file is already open.

        Raises
        ------
            OSError: If the file cannot be opened. The handle is not ready
                     afterwards; nothing is retried.

        """
        with self._locked():
            if self._ready:
                return
            try:
                fd = os.open(self.filename, self._mode, self._permission)
                try:
                    self._file = open(fd, "ab")
                except BaseException:
                    os.close(fd)
                    raise
            except OSError as e:
                self._file = None
                self._ready = False
                if self._debug:
                    logger.error("Unable to open the file %s: %s", self.filename, e)
                raise
            self.sink.set_target(self._file)
            self._ready = True
            if self._debug:
                logger.debug("Opened %s", self.filename)

    def close(self) -> None:
        """Close the file if it is open.

        The handle is not ready afterwards even if closing fails.

        Raises
        ------
            OSError: If closing the file fails.

        """
        with self._locked():
            if not self._ready:
                return
            try:
                self._file.close()
            except OSError as e:
                if self._debug:
                    logger.error("Unable to close the file %s: %s", self.filename, e)
                raise
            finally:
                self._ready = False
                self._file = None
                self.sink.set_target(None)

    def fire(self, record: logging.LogRecord) -> None:
        """Write one record to the file.

        Raises
        ------
            NotReadyError: If the file is not open.
            SerializationError: If the record cannot be rendered.
            OSError: If writing or flushing fails.

        """
        if not self._ready:
            raise NotReadyError(self.filename)

        with self._locked():
            if not self._ready:
                raise NotReadyError(self.filename)
            self.sink.write(record)

    def set_mode(self, mode: int) -> int:
        """Reopen the file with new ``os.open`` flags.

        Returns
        -------
            The previous flags.

        Raises
        ------
            OSError: If closing or reopening fails. The new flags are kept and
                     the handle stays closed until ``open`` succeeds.

        """
        previous, self._mode = self._mode, mode
        self.close()
        self.open()
        return previous

    def set_permission(self, permission: int) -> int:
        """Reopen the file with new permission bits.

        Returns
        -------
            The previous permission bits.

        Raises
        ------
            OSError: If closing or reopening fails. The new bits are kept and
                     the handle stays closed until ``open`` succeeds.

        """
        previous, self._permission = self._permission, permission
        self.close()
        self.open()
        return previous
