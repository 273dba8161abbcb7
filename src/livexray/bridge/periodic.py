"""Periodic task with a non-blocking re-entrancy guard.

The client runtime reaches the host only through two fire-and-forget loops
(state push, command poll). Each loop is a `PeriodicTask`:

- `tick()` runs one cycle unless the previous one is still in flight, in
  which case it returns ``False`` immediately. Failures of a cycle are logged
  and swallowed; the loop keeps going.
- `run()` starts a tick every ``interval_ms`` *without* awaiting it, so a slow
  host never delays the schedule and never causes overlapping cycles.

Tests drive `tick()` directly, or inject ``sleep`` to replace wall-clock time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from livexray.core.settings import get_logger

logger = get_logger("livexray.periodic")

Sleep = Callable[[float], Awaitable[None]]


class PeriodicTask:
    """Run ``step`` every ``interval_ms`` with at most one cycle in flight."""

    def __init__(
        self,
        name: str,
        interval_ms: int,
        step: Callable[[], Awaitable[None]],
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.name = name
        self.interval_ms = interval_ms
        self.in_flight = False
        self._step = step
        self._sleep = sleep
        self._runner: asyncio.Task[None] | None = None
        self._ticks: set[asyncio.Task[bool]] = set()

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    async def tick(self) -> bool:
        """Run one cycle; return ``False`` if skipped because one is in flight."""
        if self.in_flight:
            return False
        self.in_flight = True
        try:
            await self._step()
        except Exception as exc:
            logger.debug("%s cycle failed: %s", self.name, exc)
        finally:
            self.in_flight = False
        return True

    def trigger(self) -> asyncio.Task[bool]:
        """Schedule a tick now without waiting for it."""
        task = asyncio.get_running_loop().create_task(self.tick())
        self._ticks.add(task)
        task.add_done_callback(self._ticks.discard)
        return task

    async def run(self) -> None:
        """Trigger a tick every interval until cancelled."""
        while True:
            self.trigger()
            await self._sleep(self.interval_ms / 1000)

    def start(self) -> None:
        if not self.running:
            self._runner = asyncio.get_running_loop().create_task(self.run())

    async def stop(self) -> None:
        """Cancel the schedule and wait for in-flight ticks to finish."""
        if self._runner is not None:
            self._runner.cancel()
            try:
                await self._runner
            except asyncio.CancelledError:
                pass
            self._runner = None
        if self._ticks:
            await asyncio.gather(*self._ticks, return_exceptions=True)


__all__ = ["PeriodicTask"]
