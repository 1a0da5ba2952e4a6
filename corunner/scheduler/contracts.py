"""
CoRunner — Collaborator Contracts
===================================
The only things the runner knows about the work it schedules.

Design:
- ``Task`` is a protocol: anything with a ``run()`` method qualifies.
  Extra attributes (priority, deadline, ...) are for the comparator only.
- ``run()`` returns a ``TaskRun`` (outcome + optional stop function) or a
  bare awaitable, which is treated as a ``TaskRun`` without a stop.
- Notifications receive frozen info records.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

Comparator = Callable[[Any, Any], int]
"""Ranks two tasks: -1 when the first has strictly higher priority, 0 on tie, 1 otherwise."""

StopFunction = Callable[[], None]


# ── Task Protocol ───────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class TaskRun:
    """What ``Task.run()`` hands back: the pending outcome and how to stop it."""

    outcome: Awaitable[Any]
    stop: StopFunction | None = None


@runtime_checkable
class Task(Protocol):
    """Unit of asynchronous work.  ``run()`` is called at most once per submission."""

    def run(self) -> TaskRun | Awaitable[Any]:
        ...


def as_task_run(result: TaskRun | Awaitable[Any]) -> TaskRun:
    """Normalise the return value of ``Task.run()``."""
    if isinstance(result, TaskRun):
        return result
    return TaskRun(outcome=result)


# ── Notifications ───────────────────────────────────────────────────────

class TaskOutcome(StrEnum):
    """How a task reached its terminal state."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class TaskStartInfo:
    """Passed to ``on_task_start`` right after ``run()`` was invoked."""

    task: Any


@dataclass(frozen=True, slots=True)
class TaskEndInfo:
    """
    Passed to ``on_task_end`` exactly once per started task.

    ``result`` is the success value, or the exception for failed and
    aborted tasks.
    """

    task: Any
    result: Any
    outcome: TaskOutcome
