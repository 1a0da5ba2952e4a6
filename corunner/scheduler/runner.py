"""
CoRunner — Concurrency-Bounded Priority Runner
================================================
Runs at most ``concurrency`` tasks at once, always admitting the
highest-priority queued task when a slot frees up.

Flow (single event loop thread, no locks):
    add_task -> heap -> admission pass -> run -> settle -> admission pass

Cancellation may interrupt a record at any point:
- queued:  the record is aborted now and skipped when popped later
- running: the record is aborted now, its stop function is signalled,
           and the slot is released immediately
- ended:   no-op

Usage:
    runner = CoRunner(concurrency=2, comparator=compare_by(lambda t: t.priority))
    handle = runner.add_task(my_task)
    runner.start()
    result = await handle
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Any

from corunner.core.config import get_settings
from corunner.core.exceptions import NoRunningLoopError, TaskAbortedError
from corunner.core.logging import get_logger
from corunner.scheduler.contracts import (
    Comparator,
    Task,
    TaskEndInfo,
    TaskOutcome,
    TaskStartInfo,
    as_task_run,
)
from corunner.scheduler.heap import PriorityHeap
from corunner.scheduler.options import RunnerOptions, build_options, noop, update_options
from corunner.scheduler.records import TaskHandle, TaskRecord

logger = get_logger(__name__)


class RunnerState(StrEnum):
    """Admission state of a runner."""

    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"


class CoRunner:
    """
    Priority-ordered, concurrency-bounded task runner.

    Thread safety: NOT thread-safe.  Every method must be called from the
    event loop thread that runs the tasks.
    """

    def __init__(
        self,
        concurrency: int | None = None,
        comparator: Comparator | None = None,
        *,
        on_task_start=noop,
        on_task_end=noop,
        on_empty=noop,
        name: str = "corunner",
    ) -> None:
        if concurrency is None:
            concurrency = get_settings().default_concurrency
        if comparator is None:
            raise TypeError("CoRunner requires a comparator")
        self._options = build_options(
            concurrency=concurrency,
            comparator=comparator,
            on_task_start=on_task_start,
            on_task_end=on_task_end,
            on_empty=on_empty,
        )
        self._heap: PriorityHeap[TaskRecord] = PriorityHeap(
            comparator, key=lambda record: record.task
        )
        self._running: set[TaskRecord] = set()
        self._started = False
        self._paused = False
        self._was_stopped = False
        self._drain_check_pending = False
        self._log = logger.bind(runner=name)

    # ── Introspection ───────────────────────────────────────────────────

    @property
    def options(self) -> RunnerOptions:
        return self._options

    @property
    def running_count(self) -> int:
        return len(self._running)

    @property
    def pending_count(self) -> int:
        """Number of queued records, including cancelled ones not yet popped."""
        return len(self._heap)

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def state(self) -> RunnerState:
        if not self._started:
            return RunnerState.STOPPED if self._was_stopped else RunnerState.IDLE
        if self._paused:
            return RunnerState.PAUSED
        return RunnerState.ACTIVE

    # ── Configuration ───────────────────────────────────────────────────

    def set_options(self, **changes: Any) -> None:
        """
        Update runner options in place.

        Raises ``InvalidConfigurationError`` if any value is invalid;
        nothing is applied in that case.
        """
        previous_concurrency = self._options.concurrency
        update_options(self._options, **changes)
        if "comparator" in changes:
            self._heap.set_comparator(self._options.comparator)
        self._log.debug("runner.options_updated", changed=sorted(changes))
        if self._options.concurrency > previous_concurrency and self._heap:
            self._schedule()

    def set_concurrency(self, concurrency: int) -> None:
        self.set_options(concurrency=concurrency)

    # ── Lifecycle ───────────────────────────────────────────────────────

    def start(self) -> None:
        """Begin admitting work.  No-op if already started."""
        if self._started:
            return
        self._started = True
        self._log.info("runner.started", pending=len(self._heap))
        self._schedule()

    def pause(self) -> None:
        """Stop admitting new work.  Running tasks are unaffected."""
        self._paused = True
        self._log.info("runner.paused", running=len(self._running))

    def resume(self) -> None:
        self._paused = False
        self._log.info("runner.resumed", pending=len(self._heap))
        self._schedule()

    def stop(self) -> None:
        """
        Abrupt reset: stop admitting and discard the queue.

        Discarded tasks get no outcome at all.  Running tasks continue to
        completion and still deliver their outcome.
        """
        dropped = len(self._heap)
        self._started = False
        self._was_stopped = True
        self._heap.clear()
        self._log.info("runner.stopped", dropped=dropped, running=len(self._running))

    def cancel_all_running(self) -> None:
        """Apply ``cancel()`` to every running task.  Queued tasks are kept."""
        for record in list(self._running):
            self._cancel(record)

    # ── Submission ──────────────────────────────────────────────────────

    def add_task(self, task: Any) -> TaskHandle:
        """
        Queue ``task`` and return its handle.

        The task starts immediately if the runner is active and a slot is
        free.  Submitting to an idle, paused or stopped runner just queues.

        Raises ``TypeError`` if ``task`` has no ``run()`` method.
        Raises ``NoRunningLoopError`` when called outside an event loop.
        """
        if not isinstance(task, Task):
            raise TypeError(f"{type(task).__name__} has no run() method")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise NoRunningLoopError(
                "add_task() must be called from a running event loop", task=task
            ) from None

        record = TaskRecord(task=task, future=loop.create_future())
        handle = TaskHandle(record, lambda: self._cancel(record))
        record.future.add_done_callback(lambda fut: self._on_handle_done(record, fut))
        self._heap.insert(record)
        self._log.debug("runner.task_queued", task=task, pending=len(self._heap))
        if self._started:
            self._schedule()
        return handle

    # ── Admission ───────────────────────────────────────────────────────

    def _schedule(self) -> None:
        """Admission pass: fill free slots from the heap, then check for drain."""
        if not self._started or self._paused:
            return
        while len(self._running) < self._options.concurrency and self._heap:
            record = self._heap.extract_min()
            if record.canceled:
                continue
            self._admit(record)

        if not self._running and not self._heap:
            self._request_drain_check()

    def _admit(self, record: TaskRecord) -> None:
        record.started = True
        self._running.add(record)
        self._log.debug("runner.task_started", task=record.task, running=len(self._running))
        try:
            self._options.on_task_start(TaskStartInfo(task=record.task))
        except Exception as exc:
            if not record.ended:
                self._settle(record, TaskOutcome.FAILED, exc, reschedule=False)
            # The raise unwinds the enclosing pass; resume admission next turn.
            asyncio.get_running_loop().call_soon(self._schedule)
            raise
        if record.ended:
            # cancelled from inside on_task_start
            return

        try:
            run = as_task_run(record.task.run())
            outcome = asyncio.ensure_future(run.outcome)
        except Exception as exc:
            # Synchronous failure; the enclosing admission pass keeps filling slots.
            self._settle(record, TaskOutcome.FAILED, exc, reschedule=False)
            return

        record.stop = run.stop
        outcome.add_done_callback(lambda fut: self._on_outcome(record, fut))

    def _on_outcome(self, record: TaskRecord, fut: asyncio.Future) -> None:
        if fut.cancelled():
            if not record.ended:
                self._settle(record, TaskOutcome.FAILED, asyncio.CancelledError())
            return
        exc = fut.exception()
        if record.ended:
            # Aborted earlier; the late outcome is observed and dropped.
            return
        if exc is not None:
            self._settle(record, TaskOutcome.FAILED, exc)
        else:
            self._settle(record, TaskOutcome.SUCCEEDED, fut.result())

    def _settle(
        self,
        record: TaskRecord,
        outcome: TaskOutcome,
        result: Any,
        *,
        reschedule: bool = True,
    ) -> None:
        """Natural end of a running record.  Caller guarantees ``not record.ended``."""
        record.ended = True
        if outcome is TaskOutcome.SUCCEEDED:
            record.resolve(result)
        else:
            record.reject(result)
        self._log.debug("runner.task_ended", task=record.task, outcome=outcome.value)
        self._release(
            record,
            TaskEndInfo(task=record.task, result=result, outcome=outcome),
            reschedule=reschedule,
        )

    def _release(
        self, record: TaskRecord, info: TaskEndInfo, *, reschedule: bool = True
    ) -> None:
        try:
            self._options.on_task_end(info)
        finally:
            self._running.discard(record)
            if reschedule:
                self._schedule()

    # ── Cancellation ────────────────────────────────────────────────────

    def _on_handle_done(self, record: TaskRecord, fut: asyncio.Future) -> None:
        """A handle future cancelled by asyncio (wait_for, awaiting task) aborts its record."""
        if fut.cancelled():
            self._cancel(record)

    def _cancel(self, record: TaskRecord) -> None:
        if record.ended:
            return
        record.canceled = True
        record.ended = True
        error = TaskAbortedError(record.task)
        record.reject(error)

        if not record.started:
            self._log.debug("runner.task_aborted", task=record.task, state="queued")
            return

        self._log.info("runner.task_aborted", task=record.task, state="running")
        if record.stop is not None:
            try:
                record.stop()
            except Exception:
                self._log.warning("runner.task_stop_failed", task=record.task, exc_info=True)
        self._release(
            record,
            TaskEndInfo(task=record.task, result=error, outcome=TaskOutcome.ABORTED),
        )

    # ── Drain notification ──────────────────────────────────────────────

    def _request_drain_check(self) -> None:
        if self._drain_check_pending:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # start() before any loop exists: nothing was ever submitted.
            return
        self._drain_check_pending = True
        loop.call_soon(self._check_drained)

    def _check_drained(self) -> None:
        self._drain_check_pending = False
        if self._running or self._heap:
            return
        self._log.info("runner.drained")
        self._options.on_empty()
