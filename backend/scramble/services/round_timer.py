"""Round Timer: fixed-duration countdown with one tick per second and a single expiry.

Invariants:
    - on_tick fires exactly once per elapsed second with the new remaining count
      (duration-1, ..., 0), catching up if the loop was delayed
    - on_expire fires exactly once, right after the tick that reaches 0; the timer then
      stops itself (status FINISHED)
    - Internal polling every <= 100ms against time.monotonic keeps each tick within
      ±100ms of wall-clock truth over the full round
    - pause()/resume() preserve remaining time; reset() stops and re-arms without starting
    - A raising callback is logged and never kills the loop

Design Decisions:
    - start() returns a TimerHandle wrapping the asyncio task: teardown cancels it
      deterministically instead of relying on closures being collected
    - Elapsed time accumulates across pause windows; ticks are derived from elapsed,
      not counted from sleeps, so sleep jitter never accumulates as drift
    - Callbacks are plain functions; anything async is scheduled by the caller
"""

import asyncio
import logging
import time
from typing import Callable

from scramble.core.domain_types import ROUND_DURATION_SECONDS, TimerStatus

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]
ExpireCallback = Callable[[], None]

MAX_POLL_INTERVAL_MS = 100


class TimerHandle:
    """Cancellable handle for one started countdown."""

    def __init__(self, timer: "RoundTimer", generation: int):
        self._timer = timer
        self._generation = generation

    @property
    def active(self) -> bool:
        return (
            self._timer._generation == self._generation
            and self._timer.status in (TimerStatus.RUNNING, TimerStatus.PAUSED)
        )

    def cancel(self) -> None:
        """Stop the countdown, if this handle's countdown is still the current one."""
        if self._timer._generation == self._generation:
            self._timer.stop()

    async def wait(self) -> None:
        """Resolve when the countdown finishes, is stopped, or is superseded."""
        while self.active:
            task = self._timer._task
            if task is None:
                await asyncio.sleep(self._timer.poll_interval)
                continue
            await asyncio.wait({task})


class RoundTimer:
    """Countdown clock driven by an asyncio task."""

    def __init__(
        self,
        poll_interval_ms: int = 50,
        tick_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not 0 < poll_interval_ms <= MAX_POLL_INTERVAL_MS:
            raise ValueError(f"poll_interval_ms must be in 1..{MAX_POLL_INTERVAL_MS}")
        self.poll_interval = poll_interval_ms / 1000
        self.tick_interval = tick_interval
        self._clock = clock

        self.status = TimerStatus.IDLE
        self.duration = ROUND_DURATION_SECONDS
        self.remaining = ROUND_DURATION_SECONDS
        self._on_tick: TickCallback | None = None
        self._on_expire: ExpireCallback | None = None
        self._ticks_fired = 0
        self._accumulated = 0.0
        self._started_at: float | None = None
        self._task: asyncio.Task | None = None
        self._generation = 0

    # -- Queries -----------------------------------------------------------

    @property
    def elapsed(self) -> float:
        """Seconds of running time in the current countdown (pauses excluded)."""
        running = 0.0
        if self._started_at is not None:
            running = self._clock() - self._started_at
        return self._accumulated + running

    @property
    def progress(self) -> float:
        """Percent of the countdown consumed, 0-100."""
        if self.duration <= 0:
            return 100.0
        return min(100.0, self._ticks_fired * 100 / self.duration)

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    # -- Control -----------------------------------------------------------

    def start(
        self,
        duration_seconds: int,
        on_tick: TickCallback | None = None,
        on_expire: ExpireCallback | None = None,
    ) -> TimerHandle:
        """Begin a countdown, superseding any countdown already in progress."""
        if duration_seconds < 0:
            raise ValueError("duration_seconds must be >= 0")
        self._cancel_task()
        self._generation += 1
        self.duration = duration_seconds
        self.remaining = duration_seconds
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._ticks_fired = 0
        self._accumulated = 0.0
        self._launch()
        return TimerHandle(self, self._generation)

    def pause(self) -> None:
        if self.status != TimerStatus.RUNNING:
            return
        self._accumulated = self.elapsed
        self._started_at = None
        self._cancel_task()
        self.status = TimerStatus.PAUSED

    def resume(self) -> None:
        if self.status != TimerStatus.PAUSED:
            return
        self._launch()

    def stop(self) -> None:
        """Halt ticking; remaining time is kept for inspection."""
        if self.status in (TimerStatus.RUNNING, TimerStatus.PAUSED):
            self._accumulated = self.elapsed
            self._started_at = None
            self._cancel_task()
            self.status = TimerStatus.IDLE

    def reset(self, duration_seconds: int = ROUND_DURATION_SECONDS) -> None:
        """Stop any countdown and re-arm with a fresh duration. Does not start."""
        self._cancel_task()
        self._generation += 1
        self.status = TimerStatus.IDLE
        self.duration = duration_seconds
        self.remaining = duration_seconds
        self._ticks_fired = 0
        self._accumulated = 0.0
        self._started_at = None
        self._on_tick = None
        self._on_expire = None

    # -- Loop --------------------------------------------------------------

    def _launch(self) -> None:
        self._started_at = self._clock()
        self.status = TimerStatus.RUNNING
        self._task = asyncio.get_running_loop().create_task(self._run())

    def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        while True:
            due = min(int(self.elapsed / self.tick_interval), self.duration)
            while self._ticks_fired < due:
                self._ticks_fired += 1
                self.remaining = self.duration - self._ticks_fired
                self._invoke("on_tick", self._on_tick, self.remaining)
                if self._task is not asyncio.current_task():
                    return
            if self._ticks_fired >= self.duration:
                self._finish()
                return
            await asyncio.sleep(self.poll_interval)

    def _finish(self) -> None:
        self._accumulated = self.elapsed
        self._started_at = None
        self._task = None
        self.status = TimerStatus.FINISHED
        self._invoke("on_expire", self._on_expire)

    def _invoke(self, name: str, callback: Callable | None, *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Timer {name} callback failed")
