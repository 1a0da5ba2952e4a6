"""
CoRunner — Task Records & Handles
===================================
Per-submission bookkeeping owned by the runner, and the caller-facing
handle bound to it.

Invariants:
- ``ended`` flips False -> True at most once; outcome delivery happens
  only at that flip.
- ``canceled`` is set at most once and never cleared.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Generator, Generic, TypeVar

from corunner.scheduler.contracts import StopFunction

T = TypeVar("T")


class RecordState(StrEnum):
    """Where a record is in its lifecycle."""

    QUEUED = "queued"
    RUNNING = "running"
    ENDED = "ended"


@dataclass(eq=False, slots=True)
class TaskRecord:
    """Scheduler-internal entry for one submitted task."""

    task: Any
    future: asyncio.Future = field(repr=False)
    canceled: bool = False
    started: bool = False
    ended: bool = False
    stop: StopFunction | None = field(default=None, repr=False)

    @property
    def state(self) -> RecordState:
        if self.ended:
            return RecordState.ENDED
        if self.started:
            return RecordState.RUNNING
        return RecordState.QUEUED

    def resolve(self, value: Any) -> None:
        """Deliver a success value to the handle."""
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, exc: BaseException) -> None:
        """Deliver a failure to the handle."""
        if self.future.done():
            return
        if isinstance(exc, asyncio.CancelledError):
            self.future.cancel()
        else:
            self.future.set_exception(exc)


class TaskHandle(Generic[T]):
    """
    Returned by ``CoRunner.add_task``.

    Await it (or its ``future``) for the task's result.  ``cancel()`` is
    idempotent and safe at any point of the task's life.
    """

    __slots__ = ("_record", "_cancel")

    def __init__(self, record: TaskRecord, cancel: Callable[[], None]) -> None:
        self._record = record
        self._cancel = cancel

    @property
    def task(self) -> Any:
        return self._record.task

    @property
    def future(self) -> asyncio.Future:
        return self._record.future

    @property
    def state(self) -> RecordState:
        return self._record.state

    @property
    def cancelled(self) -> bool:
        """``True`` once ``cancel()`` has aborted the task."""
        return self._record.canceled

    def done(self) -> bool:
        return self._record.future.done()

    def cancel(self) -> None:
        self._cancel()

    def __await__(self) -> Generator[Any, None, T]:
        return self._record.future.__await__()

    def __repr__(self) -> str:
        return f"TaskHandle(task={self._record.task!r}, state={self.state.value!r})"
