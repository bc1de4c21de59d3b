# src/taskr_voice/core/scheduler.py

from __future__ import annotations

"""
Deferred units of work.

Delayed assistant replies are scheduled here instead of being fired from
ad-hoc timers, so they come with a cancel handle and tests can swap in a
virtual clock.
"""

import asyncio
import logging
from collections.abc import Callable

from .ports import Cancellable

logger = logging.getLogger(__name__)


def _run_logged(fn: Callable[[], None]) -> None:
    try:
        fn()
    except Exception:
        logger.exception("Deferred callback %r failed", fn)


class AsyncioScheduler:
    """DeferredScheduler on top of an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, fn: Callable[[], None]) -> Cancellable:
        return self.loop.call_later(max(0.0, float(delay)), _run_logged, fn)
