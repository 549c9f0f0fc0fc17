"""Unit tests for the background session cleanup task."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from prometheus_client import REGISTRY

from front_controller.core.cleanup import SessionCleanup, start_cleanup_task, stop_cleanup_task
from front_controller.session.memory import MemorySessionStorage


class CountingStorage:
    def __init__(self, removed=0):
        self.calls = 0
        self.removed = removed

    def cleanup_expired(self):
        self.calls += 1
        return self.removed


class FailingStorage:
    def __init__(self):
        self.calls = 0

    def cleanup_expired(self):
        self.calls += 1
        raise OSError("backend unavailable")


@pytest.mark.asyncio
async def test_loop_runs_immediately_and_stops():
    storage = CountingStorage(removed=3)
    cleanup = SessionCleanup(storage, interval_seconds=60)

    task = asyncio.create_task(cleanup.run())
    await asyncio.sleep(0.05)
    cleanup.stop_event.set()
    await asyncio.wait_for(task, timeout=1.0)

    assert storage.calls == 1


@pytest.mark.asyncio
async def test_run_once_returns_removed_count():
    metric = "front_controller_expired_session_entries_removed_total"
    before = REGISTRY.get_sample_value(metric) or 0.0
    cleanup = SessionCleanup(CountingStorage(removed=4))

    assert await cleanup.run_once() == 4
    assert REGISTRY.get_sample_value(metric) == before + 4


@pytest.mark.asyncio
async def test_loop_repeats_at_interval():
    storage = CountingStorage()

    task = await start_cleanup_task(storage, interval_seconds=0.01)
    await asyncio.sleep(0.1)
    await stop_cleanup_task(task)

    assert storage.calls >= 2
    assert task.done()


@pytest.mark.asyncio
async def test_failures_do_not_stop_the_loop():
    storage = FailingStorage()

    task = await start_cleanup_task(storage, interval_seconds=0.01)
    await asyncio.sleep(0.1)
    await stop_cleanup_task(task)

    assert storage.calls >= 2
    assert task.exception() is None


@pytest.mark.asyncio
async def test_cleanup_removes_expired_session_entries():
    now = [datetime(2024, 1, 1, tzinfo=UTC)]
    storage = MemorySessionStorage(clock=lambda: now[0])
    section = storage.open(None).get_section("requests")
    section["abc12"] = "stored"
    section.set_expiration(10, "abc12")
    now[0] += timedelta(seconds=11)

    task = await start_cleanup_task(storage, interval_seconds=60)
    await asyncio.sleep(0.05)
    await stop_cleanup_task(task)

    assert storage.cleanup_expired() == 0
