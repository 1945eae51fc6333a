"""Structured logging for the combat exhaustion module.

Every decision the engine and the overlay take is logged as a structlog
event with structured fields (actor, hp, prev, mode, in_combat, tracker,
dc), so a debug-level run reads as a trace of why a level was or was not
applied. Each session binds its ``session_id``/``user_id`` once at ``init``
and every later event carries them.

Example:
    >>> from combat_exhaustion.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> get_logger(__name__).debug("Recovered from 0 HP", actor="Tordek", accrue=True)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

from combat_exhaustion.core.constants import MODULE_ID


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

APP_NAME = "combat_exhaustion"
STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# =============================================================================
# Processors
# =============================================================================


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Stamp every entry with the package and the flag namespace.

    Args:
        logger: The wrapped logger instance.
        method_name: Name of the logging method called.
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with ``app`` and ``module_id`` set.
    """
    event_dict["app"] = APP_NAME
    event_dict.setdefault("module_id", MODULE_ID)
    return event_dict


def drop_unset_fields(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Remove fields whose value is None (e.g. an unseeded ``prev``)."""
    return {key: value for key, value in event_dict.items() if value is not None}


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        drop_unset_fields,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_format: bool) -> list[Processor]:
    if json_format:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Unset arguments fall back to the module settings: ``level`` to
    ``Settings.effective_log_level`` and ``json_format`` to
    ``Settings.json_logs``.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render JSON lines instead of console output.
        log_file: Optional file that also receives stdlib log records.
    """
    if level is None or json_format is None:
        from combat_exhaustion.core.config import get_settings

        settings = get_settings()
        level = level or settings.effective_log_level
        json_format = settings.json_logs if json_format is None else json_format

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[*_shared_processors(), *_renderer(json_format)],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format=STDLIB_FORMAT, level=numeric_level, stream=sys.stdout, force=True)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(STDLIB_FORMAT))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind fields carried by every later entry in this context.

    Example:
        >>> bind_context(session_id="session-gm", user_id="gm")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "add_app_context",
    "drop_unset_fields",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
