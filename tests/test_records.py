"""
CoRunner Tests — Task Records & Handles
=========================================
Validates:
- Record state derivation (queued / running / ended)
- resolve / reject deliver at most once
- Handles are awaitable and expose their record
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from corunner.scheduler.records import RecordState, TaskHandle, TaskRecord


@pytest.fixture
def record(detached_future) -> TaskRecord:
    return TaskRecord(task="payload", future=detached_future)


@pytest.fixture
def detached_future():
    loop = asyncio.new_event_loop()
    yield loop.create_future()
    loop.close()


class TestRecordState:

    def test_new_record_is_queued(self, record):
        assert record.state is RecordState.QUEUED
        assert not (record.canceled or record.started or record.ended)

    def test_started_record_is_running(self, record):
        record.started = True
        assert record.state is RecordState.RUNNING

    def test_ended_wins_over_started(self, record):
        record.started = True
        record.ended = True
        assert record.state is RecordState.ENDED


class TestRecordDelivery:

    def test_resolve_once(self, record):
        record.resolve(1)
        record.resolve(2)
        assert record.future.result() == 1

    def test_reject_after_resolve_is_ignored(self, record):
        record.resolve("ok")
        record.reject(ValueError("late"))
        assert record.future.result() == "ok"

    def test_reject_sets_exception(self, record):
        error = ValueError("bad")
        record.reject(error)
        assert record.future.exception() is error

    def test_reject_with_cancelled_error_cancels_future(self, record):
        record.reject(asyncio.CancelledError())
        assert record.future.cancelled()


class TestTaskHandle:

    @pytest.mark.asyncio
    async def test_handle_is_awaitable(self):
        future = asyncio.get_running_loop().create_future()
        handle = TaskHandle(TaskRecord(task="t", future=future), cancel=MagicMock())
        future.set_result("value")

        assert await handle == "value"
        assert handle.done()

    def test_handle_delegates_cancel(self, record):
        cancel = MagicMock()
        handle = TaskHandle(record, cancel)

        handle.cancel()

        cancel.assert_called_once_with()
        assert handle.task == "payload"
        assert handle.future is record.future
        assert not handle.cancelled

    def test_repr_names_state(self, record):
        handle = TaskHandle(record, MagicMock())
        assert "queued" in repr(handle)
