"""
CoRunner — Task & Comparator Adapters
=======================================
Ready-made building blocks for the two caller-supplied collaborators.

Usage:
    task = CoroutineTask(fetch_page, url, priority=3)
    runner = CoRunner(concurrency=4, comparator=compare_by(lambda t: t.priority))
    handle = runner.add_task(task)
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from corunner.scheduler.contracts import Comparator, TaskRun


def compare_by(key: Callable[[Any], Any], *, reverse: bool = False) -> Comparator:
    """
    Build a comparator from a key function.

    By default a smaller key ranks higher (runs first).  With
    ``reverse=True`` a larger key ranks higher.
    """

    def comparator(a: Any, b: Any) -> int:
        ka, kb = key(a), key(b)
        if ka == kb:
            return 0
        ranked = -1 if ka < kb else 1
        return -ranked if reverse else ranked

    return comparator


class CoroutineTask:
    """
    Task that runs ``func(*args, **kwargs)`` as an ``asyncio.Task``.

    The stop function cancels that asyncio task, so the coroutine sees
    ``CancelledError`` at its next suspension point.  ``priority`` and any
    extra ``attrs`` are stored as attributes for the comparator.
    """

    def __init__(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        priority: int = 0,
        name: str | None = None,
        attrs: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.priority = priority
        self.name = name or getattr(func, "__name__", "task")
        for attr, value in (attrs or {}).items():
            setattr(self, attr, value)

    def run(self) -> TaskRun:
        runner_task = asyncio.ensure_future(self.func(*self.args, **self.kwargs))
        return TaskRun(outcome=runner_task, stop=runner_task.cancel)

    def __repr__(self) -> str:
        return f"CoroutineTask(name={self.name!r}, priority={self.priority!r})"
