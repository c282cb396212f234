"""Line formats for rendering log records."""

import json
import logging
import re
from datetime import datetime
from typing import Any, Dict

# Attributes every LogRecord carries; anything else was passed through ``extra``.
RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_BARE_VALUE = re.compile(r"^[A-Za-z0-9\-._/@^+]+$")


class LineFormatter(logging.Formatter):
    """Base class for formatters that render one record per line.

    Subclasses build an ordered mapping of fields with :meth:`fields` and
    serialize it in :meth:`render`.
    """

    def __init__(self, caller: bool = False, datefmt: str = None):
        """Initialize the formatter.

        Args:
        ----
            caller: If True, add a ``caller`` field with ``pathname:lineno``.
            datefmt: Optional ``strftime`` format for the ``time`` field.
                     Defaults to ISO 8601 with the local UTC offset.

        """
        super().__init__(datefmt=datefmt)
        self.caller = caller

    def formatTime(self, record, datefmt=None):
        """Format the record creation time."""
        if datefmt:
            return super().formatTime(record, datefmt)
        created = datetime.fromtimestamp(record.created).astimezone()
        return created.isoformat(timespec="seconds")

    def fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Collect the fields of a record in output order."""
        data = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if self.caller:
            data["caller"] = f"{record.pathname}:{record.lineno}"
        for key in sorted(record.__dict__):
            if key not in RESERVED_ATTRS and not key.startswith("_"):
                data[key] = record.__dict__[key]
        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            data["error"] = record.exc_text
        if record.stack_info:
            data["stack"] = self.formatStack(record.stack_info)
        return data

    def format(self, record: logging.LogRecord) -> str:
        """Render a record as a single line of text."""
        return self.render(self.fields(record))

    def render(self, data: Dict[str, Any]) -> str:
        """Serialize the collected fields."""
        raise NotImplementedError


class TextFormatter(LineFormatter):
    """Render records as ``key=value`` pairs.

    Example:
    -------
        time="2024-01-02T10:00:00+00:00" level=info logger=app msg="started" port=80

    """

    def render(self, data: Dict[str, Any]) -> str:
        """Join the fields as ``key=value`` pairs, quoting where needed."""
        return " ".join(f"{key}={self._quote(value)}" for key, value in data.items())

    @staticmethod
    def _quote(value: Any) -> str:
        text = value if isinstance(value, str) else str(value)
        if _BARE_VALUE.match(text):
            return text
        return json.dumps(text, ensure_ascii=False)


class JsonFormatter(LineFormatter):
    """Render records as one JSON object per line."""

    def render(self, data: Dict[str, Any]) -> str:
        """Serialize the fields as compact JSON."""
        return json.dumps(data, ensure_ascii=False, default=str)


def get_formatter(name: str = "text", caller: bool = False) -> LineFormatter:
    """Get a formatter by name.

    Args:
    ----
        name: ``"text"`` or ``"json"``.
        caller: Whether to add the ``caller`` field.

    Returns:
    -------
        A LineFormatter instance for the given name.

    """
    format_map = {
        "text": TextFormatter,
        "json": JsonFormatter,
    }
    formatter_class = format_map.get(str(name).lower())
    if formatter_class is None:
        raise ValueError(f"Unknown format {name!r}, expected one of {sorted(format_map)}")
    return formatter_class(caller=caller)
