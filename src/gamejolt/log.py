"""Structured logging for the gamejolt client.

structlog renders each event (console or JSON, chosen by ``LOG_FORMAT``)
and hands the rendered line to the stdlib :mod:`logging` tree, so output
goes wherever the host application points its handlers.  The CLI installs
a stderr handler; a library embedding the client gets the stdlib default.

Usage::

    from gamejolt.log import get_logger
    logger = get_logger(__name__)
    logger.info("score_added", table_id=12, sort=500)
"""

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "console").strip().lower()


def configure_logging(
    level: str = LOG_LEVEL, fmt: str = LOG_FORMAT
) -> None:
    """Install the structlog processor chain.

    Args:
        level: Minimum level name, e.g. ``"INFO"``.
        fmt: ``"json"`` for one JSON object per line, anything else for
            the human-readable console renderer.
    """
    level_value = getattr(logging, level.upper(), logging.INFO)
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Loggers stay uncached so structlog.testing.capture_logs sees them.
        cache_logger_on_first_use=False,
    )


def attach_stderr_handler(level: str = LOG_LEVEL) -> None:
    """Route the ``gamejolt`` stdlib logger to stderr.

    Called by the CLI.  Safe to call more than once.
    """
    root = logging.getLogger("gamejolt")
    if not any(getattr(h, "_gamejolt", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._gamejolt = True
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> Any:
    """Return a structured logger for the given module name."""
    return structlog.get_logger(name)


class LogSink:
    """Diagnostic sink shared by the signer, transport, and session manager.

    Every call is a no-op when ``verbose`` is ``False``; this is the only
    verbosity gate in the library.

    Args:
        name: Logger name, normally the owning module's ``__name__``.
        verbose: Whether events are emitted at all.
    """

    def __init__(self, name: str = "gamejolt", verbose: bool = True):
        self.name = name
        self.verbose = verbose
        self._logger = get_logger(name)

    def emit(self, event: str, **fields: Any) -> None:
        """Write an informational event."""
        if self.verbose:
            self._logger.info(event, logger=self.name, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        """Write a failure event."""
        if self.verbose:
            self._logger.warning(event, logger=self.name, **fields)

    def child(self, name: str) -> "LogSink":
        """Return a sink for a sub-component sharing this verbosity."""
        return LogSink(name=name, verbose=self.verbose)
