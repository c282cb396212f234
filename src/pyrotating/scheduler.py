"""Timed rollover scheduling for rotating log files."""

import logging
import os
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .config import RotationConfig
from .errors import NotReadyError
from .file import FileHandle
from .log import configure_package_logger
from .rotation import (
    RotationUnit,
    backup_name,
    compute_rollover,
    find_expired_backups,
)
from .sink import Sink

logger = logging.getLogger(__name__)

DATE_FMT = "%Y-%m-%d %H:%M:%S"


@dataclass
class RotationState:
    """Mutable rollover bookkeeping owned by a RotationScheduler."""

    window_start: float = 0.0
    next_deadline: float = 0.0


class RotationScheduler:
    """Rotate a log file at calendar-aligned time boundaries.

    The scheduler is passive: there is no timer thread. Every record that
    arrives checks the clock first, and if the deadline has passed the
    active file is rolled over before the record is written. Under low write
    volume a rollover therefore happens on the first write after the
    deadline, not at the deadline itself.

    Example:
    -------
        scheduler = RotationScheduler(
            RotationConfig("/var/log/app.log", backup_count=7)
        )
        scheduler.fire(record)  # rotates first when a new day has started
        scheduler.close()

    """

    def __init__(
        self,
        config: RotationConfig,
        *,
        clock: Callable[[], float] = time.time,
        file_handle: Optional[FileHandle] = None,
    ):
        """Initialize the scheduler and open the active file.

        Args:
        ----
            config: Rotation settings.
            clock: Returns the current Unix time. Injected for tests.
            file_handle: Handle to write through. By default one is opened
                         for ``config.filename``.

        Raises:
        ------
            OSError: If the active file cannot be opened.

        """
        self._config = config
        self._clock = clock
        if config.debug:
            configure_package_logger()
        self._lock = threading.Lock()
        self.state = RotationState()

        if file_handle is None:
            file_handle = FileHandle(
                config.filename,
                mode=config.mode,
                permission=config.permission,
                sink=Sink(
                    lock=None,
                    terminator=config.terminator,
                    encoding=config.encoding,
                ),
                debug=config.debug,
            )
        self.file = file_handle
        self.recompute_rollover()

    @property
    def config(self) -> RotationConfig:
        """The current rotation settings."""
        return self._config

    @property
    def filename(self) -> str:
        """Absolute path of the active file."""
        return self._config.filename

    @property
    def next_deadline(self) -> float:
        """Unix time at or after which the next write rolls the file over."""
        return self.state.next_deadline

    @property
    def is_ready(self) -> bool:
        """True while the active file is open for writing."""
        return self.file.is_ready

    @property
    def backup_count(self) -> int:
        """Number of backups kept; 0 keeps all of them."""
        return self._config.backup_count

    @backup_count.setter
    def backup_count(self, value: int) -> None:
        """Set the number of backups kept."""
        with self._lock:
            self._config = self._config.replace(backup_count=value)

    @property
    def debug(self) -> bool:
        """Whether diagnostics are reported."""
        return self._config.debug

    @debug.setter
    def debug(self, value: bool) -> None:
        """Turn diagnostics on or off for the scheduler, file and sink."""
        with self._lock:
            self._config = self._config.replace(debug=bool(value))
            self.file.debug = bool(value)

    @property
    def terminator(self) -> str:
        """String appended after every record."""
        return self._config.terminator

    @terminator.setter
    def terminator(self, value: str) -> None:
        """Set the string appended after every record."""
        with self._lock:
            self._config = self._config.replace(terminator=value)
            self.file.sink.terminator = value

    def set_interval(self, unit, multiplier: int = 1) -> None:
        """Change the rotation interval.

        The next deadline is recomputed from the current time with the new
        interval; time already spent in the old interval is not carried over.
        """
        with self._lock:
            self._config = self._config.replace(
                unit=RotationUnit.parse(unit), multiplier=multiplier
            )
            self.recompute_rollover()

    def set_interval_hour(self, hours: int) -> None:
        """Rotate every ``hours`` hours."""
        self.set_interval(RotationUnit.HOUR, hours)

    def set_interval_day(self, days: int) -> None:
        """Rotate every ``days`` days at local midnight."""
        self.set_interval(RotationUnit.DAY, days)

    def set_interval_week(self, weeks: int) -> None:
        """Rotate every ``weeks`` weeks at local midnight."""
        self.set_interval(RotationUnit.WEEK, weeks)

    def set_mode(self, mode: int) -> int:
        """Reopen the active file with new ``os.open`` flags.

        Returns the previous flags; see FileHandle.set_mode for failures.
        """
        with self._lock:
            self._config = self._config.replace(mode=mode)
            return self.file.set_mode(mode)

    def set_permission(self, permission: int) -> int:
        """Reopen the active file with new permission bits.

        Returns the previous bits; see FileHandle.set_permission for failures.
        """
        with self._lock:
            self._config = self._config.replace(permission=permission)
            return self.file.set_permission(permission)

    def recompute_rollover(self) -> None:
        """Compute the next deadline from the current time."""
        window_start, deadline = compute_rollover(
            self._clock(), self._config.unit, self._config.multiplier
        )
        self.state.window_start = window_start
        self.state.next_deadline = deadline
        if self._config.debug:
            logger.debug(
                "The next rollover of %s is at %s",
                self.filename,
                datetime.fromtimestamp(deadline).strftime(DATE_FMT),
            )

    def should_rollover(self) -> bool:
        """Check if the current deadline has been reached."""
        return self._clock() >= self.state.next_deadline

    def fire(self, record: logging.LogRecord) -> None:
        """Write one record, rolling the file over first when it is due.

        Raises
        ------
            NotReadyError: If the active file is not open.
            SerializationError: If the record cannot be rendered.
            OSError: If writing or flushing fails.

        """
        if not self.file.is_ready:
            raise NotReadyError(self.filename)

        with self._lock:
            if self.should_rollover():
                self.do_rollover()
            self.file.fire(record)

    def rotate(self) -> Optional[str]:
        """Roll the file over now, regardless of the deadline."""
        with self._lock:
            return self.do_rollover()

    def do_rollover(self) -> Optional[str]:
        """Move the active file to its backup name and start a new one.

        The caller must hold the scheduler lock. Every step is best-effort so
        that a failure in one does not leave the file unrotated; only a
        failure to reopen becomes visible, as NotReadyError on later writes.

        Returns
        -------
            The backup path, or None if the active file was not renamed.

        """
        config = self._config
        debug = config.debug
        if debug:
            logger.debug("Start to rotate the log file %s", config.filename)

        try:
            self.file.close()
        except OSError:
            pass  # reported by the file handle

        dst_path = backup_name(config.filename, self.state.window_start, config.unit)
        if os.path.exists(dst_path):
            try:
                os.remove(dst_path)
            except OSError as e:
                if debug:
                    logger.error("Unable to remove %s: %s", dst_path, e)

        rotated = None
        if os.path.isfile(config.filename):
            try:
                os.rename(config.filename, dst_path)
                rotated = dst_path
            except OSError as e:
                if debug:
                    logger.error(
                        "Unable to rename %s to %s: %s", config.filename, dst_path, e
                    )

        if config.backup_count > 0:
            self._remove_expired(config)

        try:
            self.file.open()
        except OSError:
            pass  # the handle stays not ready; writes raise NotReadyError

        self.recompute_rollover()
        return rotated

    def _remove_expired(self, config: RotationConfig) -> None:
        """Delete backups beyond the retention count, best-effort."""
        try:
            expired = find_expired_backups(
                config.filename, config.unit, config.backup_count
            )
        except OSError as e:
            if config.debug:
                logger.error("Unable to list backups of %s: %s", config.filename, e)
            return

        for path in expired:
            if config.debug:
                logger.debug("Delete the old log file: %s", path)
            try:
                os.remove(path)
            except OSError as e:
                if config.debug:
                    logger.error("Unable to delete %s: %s", path, e)

    def open(self) -> None:
        """Reopen the active file after a failed rollover.

        Raises
        ------
            OSError: If the file cannot be opened.

        """
        with self._lock:
            self.file.open()

    def close(self) -> None:
        """Close the active file."""
        with self._lock:
            self.file.close()
