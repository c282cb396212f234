"""Rotation intervals, rollover deadlines and backup retention."""

import os
import re
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, NamedTuple, Pattern, Tuple, Union


HOUR = 60 * 60
DAY = HOUR * 24
WEEK = DAY * 7

HOUR_FMT = "%Y-%m-%d_%H"
DAY_FMT = "%Y-%m-%d"

# Hourly windows are counted in wall-clock hours from this local midnight.
HOUR_EPOCH = datetime(1970, 1, 1)

HOUR_RE = re.compile(r"^\d{4}-\d{2}-\d{2}_\d{2}(\.\w+)?$", re.ASCII)
DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(\.\w+)?$", re.ASCII)


class SuffixSpec(NamedTuple):
    """Backup suffix format and the pattern that recognizes it."""

    format: str
    pattern: Pattern[str]


class RotationUnit(Enum):
    """Granularity of a rotation interval."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"

    @property
    def seconds(self) -> int:
        """Length of one unit in seconds."""
        return UNIT_SECONDS[self]

    @property
    def suffix_format(self) -> str:
        """``strftime`` format of the backup suffix."""
        return UNIT_SUFFIXES[self].format

    @property
    def suffix_pattern(self) -> Pattern[str]:
        """Regular expression matching backup suffixes of this unit."""
        return UNIT_SUFFIXES[self].pattern

    @classmethod
    def parse(cls, value: Union[str, "RotationUnit"]) -> "RotationUnit":
        """Convert ``"hour"``, ``"day"`` or ``"week"`` to a unit."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown rotation unit {value!r}, expected hour, day or week"
            ) from None


UNIT_SECONDS = MappingProxyType(
    {
        RotationUnit.HOUR: HOUR,
        RotationUnit.DAY: DAY,
        RotationUnit.WEEK: WEEK,
    }
)

UNIT_SUFFIXES = MappingProxyType(
    {
        RotationUnit.HOUR: SuffixSpec(HOUR_FMT, HOUR_RE),
        RotationUnit.DAY: SuffixSpec(DAY_FMT, DAY_RE),
        RotationUnit.WEEK: SuffixSpec(DAY_FMT, DAY_RE),
    }
)


def compute_rollover(
    current_time: float, unit: RotationUnit, multiplier: int
) -> Tuple[float, float]:
    """Compute the rotation window that contains ``current_time``.

    Windows are aligned to local calendar boundaries rather than to the
    moment the process started. Hourly windows are consecutive blocks of
    ``multiplier`` wall-clock hours counted from local midnight on
    1970-01-01, so every window lasts ``multiplier`` wall-clock hours and, when
    ``multiplier`` divides 24, windows start at local midnight. Daily and
    weekly windows start at today's local midnight and last ``multiplier``
    days or weeks.

    Args:
    ----
        current_time: Unix timestamp to compute the window for.
        unit: Granularity of the interval.
        multiplier: Number of units per interval, at least 1.

    Returns:
    -------
        Tuple of (window_start, deadline) as Unix timestamps, with
        ``window_start <= current_time < deadline``.

    """
    if multiplier < 1:
        raise ValueError("multiplier must be at least 1")

    current = datetime.fromtimestamp(current_time)
    midnight = current.replace(hour=0, minute=0, second=0, microsecond=0)
    if unit is RotationUnit.HOUR:
        hours = (midnight - HOUR_EPOCH).days * 24 + current.hour
        start = HOUR_EPOCH + timedelta(hours=hours - hours % multiplier)
        end = start + timedelta(hours=multiplier)
    else:
        start = midnight
        end = midnight + timedelta(days=unit.seconds // DAY * multiplier)

    window_start, deadline = start.timestamp(), end.timestamp()
    # Wall-clock arithmetic can land inside a DST gap; never schedule the past.
    if deadline <= current_time:
        deadline = current_time + unit.seconds * multiplier
    return window_start, deadline


def backup_name(filename: str, window_start: float, unit: RotationUnit) -> str:
    """Return the backup path for the window starting at ``window_start``."""
    suffix = datetime.fromtimestamp(window_start).strftime(unit.suffix_format)
    return f"{filename}.{suffix}"


def match_backups(
    filenames: Iterable[str], base_name: str, unit: RotationUnit
) -> List[str]:
    """Keep the directory entries that are backups of ``base_name``.

    A backup is named ``<base_name>.<suffix>`` where the suffix matches the
    unit's pattern, optionally followed by one extension such as ``.gz``.
    """
    prefix = base_name + "."
    pattern = unit.suffix_pattern
    matches = []
    for name in filenames:
        if len(name) <= len(prefix) or not name.startswith(prefix):
            continue
        if pattern.match(name[len(prefix) :]):
            matches.append(name)
    return matches


def select_expired(paths: Iterable[str], backup_count: int) -> List[str]:
    """Select the oldest backups beyond the newest ``backup_count``.

    Suffixes are zero-padded and big-endian, so a lexicographic sort is a
    chronological sort.
    """
    ordered = sorted(paths)
    if backup_count <= 0 or len(ordered) < backup_count:
        return []
    return ordered[: len(ordered) - backup_count]


def list_backups(filename: str, unit: RotationUnit) -> List[str]:
    """List the existing backups of ``filename`` for ``unit``, oldest first."""
    directory, base_name = os.path.split(filename)
    names = os.listdir(directory or os.curdir)
    return sorted(
        os.path.join(directory, name) for name in match_backups(names, base_name, unit)
    )


def find_expired_backups(
    filename: str, unit: RotationUnit, backup_count: int
) -> List[str]:
    """Return the backups of ``filename`` that exceed the retention count.

    Raises
    ------
        OSError: If the directory of ``filename`` cannot be listed.

    """
    return select_expired(list_backups(filename, unit), backup_count)
