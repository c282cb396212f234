"""Time-based rotating log files for the standard logging module."""

from .config import RotationConfig, RotatingSettings
from .errors import NotReadyError, RotatingError, SerializationError
from .file import FileHandle
from .formats import JsonFormatter, TextFormatter, get_formatter
from .handlers import FileHook, RecordHook, StreamHook, TimedRotatingFileHook
from .log import configure_package_logger, disable_debug_output, enable_debug_output
from .rotation import RotationUnit, compute_rollover, find_expired_backups
from .scheduler import RotationScheduler, RotationState
from .sink import NullWriter, Sink

__all__ = [
    "RotationConfig",
    "RotatingSettings",
    "RotationUnit",
    "RotationScheduler",
    "RotationState",
    "FileHandle",
    "Sink",
    "NullWriter",
    "RecordHook",
    "StreamHook",
    "FileHook",
    "TimedRotatingFileHook",
    "TextFormatter",
    "JsonFormatter",
    "get_formatter",
    "compute_rollover",
    "find_expired_backups",
    "RotatingError",
    "NotReadyError",
    "SerializationError",
    "configure_package_logger",
    "enable_debug_output",
    "disable_debug_output",
]
