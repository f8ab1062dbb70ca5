"""
Structured logging for loader runs.

Events are key-value pairs rendered by structlog, either for the console
or as one JSON object per line. They are written to stderr by default,
so stdout is left to CLI tables.
"""

import logging
import sys
from typing import Any, TextIO

import structlog


def _renderers(json_output: bool, stream: TextIO) -> list[structlog.typing.Processor]:
    if json_output:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    # ConsoleRenderer formats exceptions itself
    return [structlog.dev.ConsoleRenderer(colors=stream.isatty())]


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging.

    Args:
        level: Log level name; events below it are dropped.
        json_output: Emit one JSON object per event instead of console lines.
        stream: Target stream, stderr when omitted.
    """
    stream = stream if stream is not None else sys.stderr
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            *_renderers(json_output, stream),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Logger for a module, usually called with ``__name__``."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind values to every event logged inside the block.

    Example:
        with log_context(collection="crm"):
            await loader.load(context)  # every event carries collection="crm"
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
