# tests/test_scheduler.py

from __future__ import annotations

import asyncio

import pytest

from taskr_voice.core.scheduler import AsyncioScheduler


@pytest.mark.asyncio
async def test_asyncio_scheduler_runs_after_delay() -> None:
    fired: list[str] = []
    sched = AsyncioScheduler()

    sched.call_later(0.02, lambda: fired.append("reply"))
    assert fired == []

    await asyncio.sleep(0.1)
    assert fired == ["reply"]


@pytest.mark.asyncio
async def test_asyncio_scheduler_cancel_handle() -> None:
    fired: list[str] = []
    sched = AsyncioScheduler(asyncio.get_running_loop())

    handle = sched.call_later(0.02, lambda: fired.append("reply"))
    handle.cancel()

    await asyncio.sleep(0.1)
    assert fired == []


@pytest.mark.asyncio
async def test_failing_callback_does_not_kill_the_loop() -> None:
    fired: list[str] = []
    sched = AsyncioScheduler()

    def boom() -> None:
        raise RuntimeError("deferred bug")

    sched.call_later(0.0, boom)
    sched.call_later(0.01, lambda: fired.append("still running"))

    await asyncio.sleep(0.1)
    assert fired == ["still running"]
