"""
CoRunner — Runner Options
===========================
Validated, mutable configuration of a single runner instance.

Usage:
    options = RunnerOptions(concurrency=2, comparator=compare_by(lambda t: t.priority))
    options.concurrency = 4          # validated on assignment
"""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from corunner.core.exceptions import InvalidConfigurationError
from corunner.scheduler.contracts import Comparator


def noop(*args: Any, **kwargs: Any) -> None:
    """Default notification callback."""


class RunnerOptions(BaseModel):
    """
    Options supplied at construction and updatable through
    ``CoRunner.set_options``.

    Notification callbacks:
    - ``on_task_start(TaskStartInfo)``
    - ``on_task_end(TaskEndInfo)``
    - ``on_empty()``
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra="forbid",
    )

    concurrency: int = Field(ge=1)
    comparator: Comparator
    on_task_start: Callable[..., Any] = noop
    on_task_end: Callable[..., Any] = noop
    on_empty: Callable[..., Any] = noop


def build_options(**values: Any) -> RunnerOptions:
    """
    Construct ``RunnerOptions``.

    Raises ``InvalidConfigurationError`` if any value fails validation.
    """
    try:
        return RunnerOptions(**values)
    except ValidationError as exc:
        raise InvalidConfigurationError(f"Invalid runner options: {exc}") from exc


def update_options(options: RunnerOptions, **changes: Any) -> None:
    """
    Apply ``changes`` to ``options`` in place.

    All changes are validated before any is applied.
    Raises ``InvalidConfigurationError`` on the first invalid value.
    """
    try:
        RunnerOptions(**{**dict(options), **changes})
    except ValidationError as exc:
        raise InvalidConfigurationError(f"Invalid runner options: {exc}") from exc
    for name, value in changes.items():
        setattr(options, name, value)
