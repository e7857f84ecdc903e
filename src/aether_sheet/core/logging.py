"""Structured logging for the Aether character engine.

Every module logs key-value events through structlog. Events about a
character can pass the character itself as ``character=``; the
``expand_character`` processor turns it into ``character_id``,
``character_name`` and ``character_level`` fields so console and JSON
output stay flat.

Example:
    >>> from aether_sheet.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Level up committed", character=hero, class_id="wizard")
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

from aether_sheet.core.config import Settings, get_settings


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


APP_NAME = "aether_sheet"
STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# =============================================================================
# Processors
# =============================================================================


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every entry with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def expand_character(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace a ``character`` value with its id, name and total level.

    Explicit ``character_id`` / ``character_level`` keys already on the
    event win over the expanded ones. Values without an ``id`` attribute
    are left alone.

    Args:
        logger: The wrapped logger instance.
        method_name: Name of the logging method called.
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with the character flattened.
    """
    character = event_dict.get("character")
    if character is None or not hasattr(character, "id"):
        return event_dict

    del event_dict["character"]
    event_dict.setdefault("character_id", character.id)
    name = getattr(character, "name", None)
    if name is not None:
        event_dict.setdefault("character_name", name)
    level = getattr(character, "level", None)
    if level is not None:
        event_dict.setdefault("character_level", level)
    return event_dict


def _processors(json_format: bool) -> list[Processor]:
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        expand_character,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        return [
            *shared,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        *shared,
        structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render JSON lines instead of the coloured console view.
        log_file: Optional file that also receives standard library records.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=_processors(json_format),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format=STDLIB_FORMAT,
        level=numeric_level,
        stream=sys.stdout,
        force=True,
    )
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(STDLIB_FORMAT))
        logging.getLogger().addHandler(file_handler)


def setup_logging(settings: Settings | None = None, log_file: str | None = None) -> None:
    """Configure logging from application settings.

    Debug mode forces DEBUG level; otherwise ``log_level`` and ``json_logs``
    decide.
    """
    if settings is None:
        settings = get_settings()

    configure_logging(
        level="DEBUG" if settings.debug else settings.log_level,
        json_format=settings.json_logs,
        log_file=log_file,
    )


# =============================================================================
# Loggers and Context
# =============================================================================


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a structlog logger, typically named after ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind key-value pairs to every later event in this context.

    Example:
        >>> bind_context(character_id="char_mira_x1a2b")
        >>> logger.info("Short rest applied")  # includes character_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def character_context(character_id: str) -> Iterator[None]:
    """Tag events inside the block with ``character_id``.

    The previous binding, if any, is restored on exit.

    Example:
        >>> with character_context(hero.id):
        ...     store.save(hero)
    """
    with structlog.contextvars.bound_contextvars(character_id=character_id):
        yield


__all__ = [
    "add_app_context",
    "expand_character",
    "configure_logging",
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "character_context",
]
