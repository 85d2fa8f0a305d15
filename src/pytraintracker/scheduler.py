"""Fixed-cadence polling scheduler."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)


class PollingScheduler:
    """Run an async *tick* every *interval* seconds.

    The first tick runs immediately on :meth:`start`. Ticks never overlap:
    if a tick outlasts the interval, the ticks it missed are dropped and the
    cadence resumes on the next slot. :meth:`stop` clears the timer at once;
    a tick already in flight is allowed to finish.
    """

    def __init__(
        self,
        tick: Callable[[], Awaitable[object]],
        *,
        interval: float,
        name: str = "pytraintracker-poll",
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._tick = tick
        self._interval = interval
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._tick_count = 0
        self._dropped_ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def dropped_ticks(self) -> int:
        return self._dropped_ticks

    def start(self) -> None:
        """Start the polling loop on the running event loop."""
        if self.is_running:
            _logger.warning("Polling scheduler %s is already running", self._name)
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)
        _logger.debug("Polling scheduler %s started with %.1fs interval", self._name, self._interval)

    def stop(self) -> None:
        """Clear the timer. No new tick starts after this returns."""
        if not self._stop_event.is_set():
            self._stop_event.set()
            _logger.debug("Polling scheduler %s stopping", self._name)

    async def aclose(self, grace: float | None = None) -> None:
        """Stop and wait for the loop to exit.

        An in-flight tick gets *grace* seconds to finish (``None`` waits
        for it); after that it is cancelled.
        """
        self.stop()
        task = self._task
        if task is None:
            return
        if not task.done():
            done, _ = await asyncio.wait({task}, timeout=grace)
            if not done:
                _logger.debug("Polling scheduler %s: in-flight tick exceeded grace period; cancelling", self._name)
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._task = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while not self._stop_event.is_set():
            self._tick_count += 1
            try:
                await self._tick()
            except Exception:
                _logger.warning("Polling tick failed", exc_info=True)

            next_at += self._interval
            now = loop.time()
            if now > next_at:
                missed = math.floor((now - next_at) / self._interval) + 1
                self._dropped_ticks += missed
                next_at += missed * self._interval
                _logger.debug("Tick overran the interval; dropped %d tick(s)", missed)

            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=next_at - now)
