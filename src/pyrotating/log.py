"""Diagnostic channel for PyRotating.

The package logger never propagates to the root logger: a rotating hook that
is attached to the root logger would otherwise receive the library's own
messages while it is in the middle of a rollover.

Importing the package configures nothing. The channel is set up the first
time a sink or scheduler is created or switched with ``debug=True``.
"""

import logging
import sys

PACKAGE_LOGGER = "pyrotating"
DIAGNOSTIC_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


class StderrHandler(logging.StreamHandler):
    """Stream handler that looks up ``sys.stderr`` on every record."""

    def __init__(self, level=logging.NOTSET):
        """Initialize the handler without binding a stream."""
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        """Return the current standard error stream."""
        return sys.stderr

    @stream.setter
    def stream(self, value):
        # The stream is always resolved at emit time.
        pass


def configure_package_logger() -> logging.Logger:
    """Attach the standard error handler to the package logger once."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.propagate = False
    if not any(isinstance(h, StderrHandler) for h in logger.handlers):
        handler = StderrHandler()
        handler.setFormatter(logging.Formatter(DIAGNOSTIC_FORMAT))
        logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.DEBUG)
    return logger


def enable_debug_output() -> None:
    """Let every diagnostic message through to standard error."""
    configure_package_logger().setLevel(logging.DEBUG)


def disable_debug_output() -> None:
    """Silence the diagnostic channel regardless of per-object debug flags."""
    configure_package_logger().setLevel(logging.CRITICAL + 1)
