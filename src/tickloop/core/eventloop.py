"""Process-wide event loop.

``EventLoop`` is a thin adapter over asyncio that offers the four operations
the rest of the package schedules with: one-shot timers, periodic timers,
next-iteration callbacks and cancellation.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

# Floor for periodic timers, a zero interval would spin the loop
MIN_INTERVAL = 0.000001


class Timer:
    """Handle for a scheduled callback."""

    def __init__(
        self,
        interval: float,
        callback: Callable[..., Any],
        periodic: bool = False,
        owner: Optional["EventLoop"] = None,
    ):
        self.interval = interval
        self.callback = callback
        self.periodic = periodic
        self._owner = owner
        self._handle: Optional[asyncio.TimerHandle] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._owner is not None:
            self._owner._timers.discard(self)

    def __repr__(self) -> str:
        kind = "periodic" if self.periodic else "once"
        state = " cancelled" if self._cancelled else ""
        return f"<Timer {kind} interval={self.interval}{state}>"


class EventLoop:
    """Timer scheduling on top of an asyncio loop."""

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        min_interval: float = MIN_INTERVAL,
    ):
        self._loop = loop or asyncio.new_event_loop()
        self._min_interval = min_interval
        self._timers: set[Timer] = set()

    @property
    def asyncio_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def time(self) -> float:
        return self._loop.time()

    def add_timer(self, interval: float, callback: Callable[[], Any]) -> Timer:
        """Run ``callback()`` once after ``interval`` seconds."""
        timer = Timer(max(float(interval), 0.0), callback, owner=self)
        timer._handle = self._loop.call_later(timer.interval, self._fire_once, timer)
        self._timers.add(timer)
        return timer

    def add_periodic_timer(self, interval: float, callback: Callable[[Timer], Any]) -> Timer:
        """Run ``callback(timer)`` every ``interval`` seconds until cancelled.

        When a tick returns an ``asyncio.Future`` the next tick is armed only
        after that future finishes, so ticks never overlap.
        """
        timer = Timer(max(float(interval), self._min_interval), callback, periodic=True, owner=self)
        self._timers.add(timer)
        self._schedule_tick(timer)
        return timer

    def future_tick(self, callback: Callable[[], Any]) -> None:
        """Run ``callback()`` on the next loop iteration."""
        self._loop.call_soon(callback)

    def cancel_timer(self, timer: Timer) -> None:
        timer.cancel()
        self._timers.discard(timer)

    def _fire_once(self, timer: Timer) -> None:
        self._timers.discard(timer)
        timer._handle = None
        if not timer.cancelled:
            timer.callback()

    def _schedule_tick(self, timer: Timer) -> None:
        timer._handle = self._loop.call_later(timer.interval, self._fire_tick, timer)

    def _fire_tick(self, timer: Timer) -> None:
        timer._handle = None
        if timer.cancelled:
            return
        try:
            result = timer.callback(timer)
        except Exception:
            # An escaping failure ends the series
            self.cancel_timer(timer)
            raise
        if isinstance(result, asyncio.Future) and not result.done():
            result.add_done_callback(lambda _: self._rearm(timer))
        else:
            self._rearm(timer)

    def _rearm(self, timer: Timer) -> None:
        if timer.cancelled:
            self._timers.discard(timer)
        else:
            self._schedule_tick(timer)

    def run_forever(self) -> None:
        self._loop.run_forever()

    def run_until_complete(self, awaitable: Awaitable[Any]) -> Any:
        return self._loop.run_until_complete(awaitable)

    def stop(self) -> None:
        self._loop.stop()


# Global instance
_loop: Optional[EventLoop] = None


def loop() -> EventLoop:
    """Get or create the process-wide event loop.

    Wraps the running asyncio loop when called from inside one, otherwise
    creates a new asyncio loop and installs it as the current event loop.
    """
    global _loop
    if _loop is None:
        try:
            base = asyncio.get_running_loop()
        except RuntimeError:
            base = asyncio.new_event_loop()
            asyncio.set_event_loop(base)
        _loop = EventLoop(base)
        logger.debug("Created process event loop")
    return _loop
