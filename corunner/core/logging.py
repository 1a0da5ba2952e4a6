"""
CoRunner — Structured Logging
===============================
JSON-structured logging for scheduler lifecycle events.
Task objects passed as ``task=`` are rendered as short labels.

Usage:
    from corunner.core.logging import get_logger
    logger = get_logger(__name__)
    logger.info("runner.task_started", running=2)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

from corunner.core.config import get_settings


def _add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application-level context to every log entry."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("environment", settings.environment.value)
    event_dict.setdefault("default_concurrency", settings.default_concurrency)
    return event_dict


def task_label(task: Any) -> str:
    """Short, render-safe label for a submitted task."""
    name = getattr(task, "name", None)
    if isinstance(name, str) and name:
        return name
    priority = getattr(task, "priority", None)
    if priority is not None:
        return f"{type(task).__name__}(priority={priority})"
    return type(task).__name__


def _summarize_task(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Replace a raw ``task`` value with its label.

    Tasks are opaque caller objects; their reprs may be huge or not
    JSON-serialisable.
    """
    if "task" in event_dict:
        event_dict["task"] = task_label(event_dict["task"])
    return event_dict


def configure_logging() -> None:
    """
    Configure structlog + stdlib logging.

    Call once from the embedding application before any log emission.
    Without it structlog falls back to its development defaults.
    """
    settings = get_settings()

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_context,
        _summarize_task,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)

    # Task bodies commonly run under asyncio; keep its debug chatter out
    logging.getLogger("asyncio").setLevel(
        logging.DEBUG if settings.debug else logging.WARNING
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger bound to the given module name."""
    return structlog.get_logger(name)
