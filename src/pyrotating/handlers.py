"""Logging handlers that write through sinks, files and rotating files.

A hook is a ``logging.Handler`` whose ``emit`` forwards the record to a
target's ``fire`` method. Failures inside ``emit`` go through
``logging.Handler.handleError`` like any other handler; call ``fire``
directly to have them raised instead.
"""

import logging
import sys
from typing import Any, Optional, Tuple

from .config import RotationConfig
from .file import DEFAULT_MODE, DEFAULT_PERM, FileHandle
from .rotation import RotationUnit
from .scheduler import RotationScheduler
from .sink import Sink

ALL_LEVELS: Tuple[int, ...] = (
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
)


class RecordHook(logging.Handler):
    """Base handler that hands every record to ``target.fire``."""

    def __init__(self, target: Any, sink: Sink, level: int = logging.NOTSET):
        """Initialize the hook.

        Args:
        ----
            target: Object with a ``fire(record)`` method.
            sink: The sink that ends up rendering records; formatters set on
                  the hook are installed on it.
            level: Minimum level; every level is accepted by default.

        """
        super().__init__(level)
        self.target = target
        self.sink = sink
        self.formatter = sink.formatter

    def levels(self) -> Tuple[int, ...]:
        """Return the levels this hook accepts."""
        return tuple(level for level in ALL_LEVELS if level >= self.level)

    def setFormatter(self, fmt: Optional[logging.Formatter]) -> None:
        """Set the formatter used to render records."""
        super().setFormatter(fmt)
        if fmt is not None:
            self.sink.formatter = fmt

    def fire(self, record: logging.LogRecord) -> None:
        """Write a record, raising on failure."""
        self.target.fire(record)

    def emit(self, record: logging.LogRecord) -> None:
        """Write a record, reporting failures through ``handleError``."""
        try:
            self.fire(record)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


class StreamHook(RecordHook):
    """Write records to a stream, standard error by default."""

    def __init__(
        self,
        stream=None,
        *,
        terminator: str = "\n",
        formatter: Optional[logging.Formatter] = None,
        level: int = logging.NOTSET,
        debug: bool = False,
    ):
        """Initialize the hook with its own locked sink."""
        sink = Sink(
            stream if stream is not None else sys.stderr,
            formatter=formatter,
            terminator=terminator,
            debug=debug,
        )
        super().__init__(sink, sink, level)

    def fire(self, record: logging.LogRecord) -> None:
        """Write a record to the stream, raising on failure."""
        self.sink.write(record)

    def set_stream(self, stream) -> None:
        """Write to ``stream`` from now on."""
        self.acquire()
        try:
            self.sink.set_target(stream)
        finally:
            self.release()


class FileHook(RecordHook):
    """Write records to a file that is never rotated."""

    def __init__(
        self,
        filename: str,
        *,
        mode: int = DEFAULT_MODE,
        permission: int = DEFAULT_PERM,
        terminator: str = "\n",
        encoding: str = "utf-8",
        formatter: Optional[logging.Formatter] = None,
        level: int = logging.NOTSET,
        debug: bool = False,
    ):
        """Initialize the hook and open ``filename``.

        Raises
        ------
            OSError: If the file cannot be opened.

        """
        sink = Sink(
            lock=None, formatter=formatter, terminator=terminator, encoding=encoding
        )
        handle = FileHandle(
            filename, mode=mode, permission=permission, sink=sink, debug=debug
        )
        super().__init__(handle, sink, level)

    @property
    def file(self) -> FileHandle:
        """The underlying file handle."""
        return self.target

    def close(self) -> None:
        """Close the file and unregister the handler."""
        try:
            self.target.close()
        finally:
            super().close()


class TimedRotatingFileHook(RecordHook):
    """Write records to a file that is rotated at time boundaries.

    Example:
    -------
        hook = TimedRotatingFileHook("app.log", backup_count=7)
        logging.getLogger("app").addHandler(hook)

    """

    def __init__(
        self,
        filename: str,
        unit=RotationUnit.DAY,
        multiplier: int = 1,
        backup_count: int = 30,
        *,
        formatter: Optional[logging.Formatter] = None,
        level: int = logging.NOTSET,
        **options: Any,
    ):
        """Initialize the hook and open ``filename``.

        Args:
        ----
            filename: Path of the active file; made absolute.
            unit: ``"hour"``, ``"day"``, ``"week"`` or a RotationUnit.
            multiplier: Number of units per interval.
            backup_count: Backups kept; 0 keeps all of them.
            formatter: Renders records. Defaults to TextFormatter.
            level: Minimum level; every level is accepted by default.
            **options: Other RotationConfig fields (mode, permission,
                       terminator, encoding, debug).

        Raises:
        ------
            OSError: If the file cannot be opened.
            ValueError: If a setting is invalid.

        """
        config = RotationConfig(
            filename=filename,
            unit=unit,
            multiplier=multiplier,
            backup_count=backup_count,
            **options,
        )
        self._init_scheduler(RotationScheduler(config), formatter, level)

    @classmethod
    def from_config(
        cls,
        config: RotationConfig,
        *,
        formatter: Optional[logging.Formatter] = None,
        level: int = logging.NOTSET,
        **scheduler_options: Any,
    ) -> "TimedRotatingFileHook":
        """Create a hook from a complete RotationConfig."""
        hook = cls.__new__(cls)
        hook._init_scheduler(
            RotationScheduler(config, **scheduler_options), formatter, level
        )
        return hook

    def _init_scheduler(
        self,
        scheduler: RotationScheduler,
        formatter: Optional[logging.Formatter],
        level: int,
    ) -> None:
        RecordHook.__init__(self, scheduler, scheduler.file.sink, level)
        if formatter is not None:
            self.setFormatter(formatter)

    @property
    def scheduler(self) -> RotationScheduler:
        """The underlying rotation scheduler."""
        return self.target

    def close(self) -> None:
        """Close the active file and unregister the handler."""
        try:
            self.target.close()
        finally:
            super().close()
