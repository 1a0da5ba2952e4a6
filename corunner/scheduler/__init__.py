"""
CoRunner — Priority Task Runner
=================================
Concurrency-bounded, priority-ordered execution of asynchronous tasks
with per-task cancellable handles.

Public API:
    CoRunner - The runner (submit, start/pause/resume/stop, options)
    TaskHandle - Awaitable handle with cancel()
    TaskRun, Task - What a task's run() returns / the task protocol
    CoroutineTask, compare_by - Ready-made task and comparator adapters
    PriorityHeap - Comparator-ordered binary heap
"""

from corunner.core.exceptions import TaskAbortedError
from corunner.scheduler.adapters import CoroutineTask, compare_by
from corunner.scheduler.contracts import (
    Comparator,
    Task,
    TaskEndInfo,
    TaskOutcome,
    TaskRun,
    TaskStartInfo,
)
from corunner.scheduler.heap import PriorityHeap
from corunner.scheduler.options import RunnerOptions
from corunner.scheduler.records import RecordState, TaskHandle, TaskRecord
from corunner.scheduler.runner import CoRunner, RunnerState

__all__ = [
    "CoRunner",
    "RunnerState",
    "RunnerOptions",
    "TaskHandle",
    "TaskRecord",
    "RecordState",
    "Task",
    "TaskRun",
    "TaskStartInfo",
    "TaskEndInfo",
    "TaskOutcome",
    "Comparator",
    "CoroutineTask",
    "compare_by",
    "PriorityHeap",
    "TaskAbortedError",
]
