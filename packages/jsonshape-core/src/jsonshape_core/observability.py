"""Structured logging for jsonshape.

This module provides:
- Structured logging setup via structlog
- An operation context manager logging start, completion and failure
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

# Logger name shared by export operations
LOGGER_NAME = "jsonshape"

_logger: BoundLogger | None = None


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("schema_exported", path="schemas/user.json")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(LOGGER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for jsonshape.

    Log records go through the stdlib root handler, which writes to stderr,
    so exported documents on stdout stay clean.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Raises:
        ValueError: If log_level is not a known level name.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", level=level, force=True)


@contextmanager
def operation(name: str, **attributes: Any) -> Iterator[dict[str, Any]]:
    """Log the start, completion and failure of an export operation.

    Args:
        name: Operation name (e.g., "export_schema").
        **attributes: Extra key/values added to each log entry.

    Yields:
        Mutable dict of attributes; keys added inside the block are logged
        on completion.

    Example:
        >>> with operation("export_registry", output_dir="schemas") as attrs:
        ...     attrs["documents"] = 3
    """
    logger = get_logger()
    attrs = dict(attributes)
    started = time.perf_counter()
    logger.debug(f"{name}_started", **attrs)
    try:
        yield attrs
    except Exception as exc:
        logger.error(f"{name}_failed", error=str(exc), **attrs)
        raise
    duration_ms = round((time.perf_counter() - started) * 1000, 3)
    logger.info(f"{name}_completed", duration_ms=duration_ms, **attrs)
