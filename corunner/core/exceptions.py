"""
CoRunner — Centralized Exception Taxonomy
===========================================
Category-based exception hierarchy with a severity property.

Design decisions:
- Category-based exceptions (SchedulerError, ConfigurationError, ...)
- Severity property on each exception for error classification
- ``TaskAbortedError`` is synthesized by the runner on cancellation; it is
  the only error the runner ever delivers that did not come from a task.

Usage:
    from corunner.core.exceptions import TaskAbortedError

    try:
        await handle
    except TaskAbortedError as exc:
        print("aborted", exc.task)
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorSeverity(StrEnum):
    """
    Error severity levels for exception classification.

    LOW < MEDIUM < HIGH < CRITICAL
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CoRunnerError(Exception):
    """
    Base exception for all CoRunner-specific errors.

    Provides:
    - severity: Classification for error handling/routing
    - error_code: Unique identifier for programmatic handling
    - task: The submitted task the error relates to, if any
    """

    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    error_code: str = "CORUNNER_ERROR"

    def __init__(self, message: str, *, task: Any = None) -> None:
        self.task = task
        super().__init__(message)

    def __repr__(self) -> str:
        parts = [
            f"{self.__class__.__name__}(",
            f"error_code={self.error_code!r}, ",
            f"severity={self.severity.value!r}",
        ]
        if self.task is not None:
            parts.append(f", task={self.task!r}")
        parts.append(")")
        return "".join(parts)


# ── Task Outcome Exceptions ───────────────────────────────────────────────


class TaskAbortedError(CoRunnerError):
    """
    Delivered to a task handle when the task is cancelled before it
    reached a natural outcome.  ``task`` is the originating task.
    """

    severity = ErrorSeverity.LOW
    error_code = "TASK_ABORTED"

    def __init__(self, task: Any) -> None:
        super().__init__("Task was aborted before completion.", task=task)


# ── Scheduler Exceptions ──────────────────────────────────────────────────


class SchedulerError(CoRunnerError):
    """Errors raised by the runner itself (misuse of its API)."""

    error_code = "SCHEDULER_ERROR"


class NoRunningLoopError(SchedulerError):
    """Raised when a task is submitted outside a running event loop."""

    severity = ErrorSeverity.HIGH
    error_code = "NO_RUNNING_LOOP"


# ── Configuration Exceptions ──────────────────────────────────────────────


class ConfigurationError(CoRunnerError):
    """Errors in configuration (missing settings, invalid values)."""

    severity = ErrorSeverity.HIGH
    error_code = "CONFIGURATION_ERROR"


class InvalidConfigurationError(ConfigurationError):
    """Raised when a runner option value is invalid."""

    error_code = "INVALID_CONFIGURATION_ERROR"
