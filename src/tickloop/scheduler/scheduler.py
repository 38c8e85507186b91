"""
Scheduler facade.

A ``Scheduler`` owns one event loop, one invoker, one set of timers and one
throttle and debounce registry each. The module-level functions delegate to a
process-wide default created on first use; tests and embedders can build
their own instances instead.
"""

import functools
import logging
from typing import Any, Callable, Dict, Optional

from ..core.config import TimingConfig, load_config
from ..core.deferred import Deferred
from ..core.errors import ErrorContext
from ..core.eventloop import EventLoop, Timer, loop
from ..core.identity import fetch_callable_unique_id
from ..core.invoke import SafeInvoker, get_invoker
from .debounce import Debouncer
from .throttle import Throttler
from .timers import Timers

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Timing primitives bound to one event loop.

    Supports:
    - One-shot and periodic timers
    - Next-iteration callbacks
    - Throttling and debouncing keyed by id or by callable identity
    """

    def __init__(
        self,
        event_loop: Optional[EventLoop] = None,
        invoker: Optional[SafeInvoker] = None,
        config: Optional[TimingConfig] = None,
        on_error: Optional[Callable[[ErrorContext], None]] = None,
    ):
        self.config = config or load_config()
        self.loop = event_loop or loop()
        self.invoker = invoker or SafeInvoker(convert_warnings=self.config.convert_warnings)
        self.timers = Timers(self.loop, self.invoker, self.config, on_error=on_error)
        self.throttler = Throttler(self.timers)
        self.debouncer = Debouncer(self.timers)

    def set_timeout(self, interval: float, callback: Callable[..., Any], *params: Any) -> Timer:
        return self.timers.set_timeout(interval, callback, *params)

    def set_interval(self, interval: float, callback: Callable[..., Any], *params: Any) -> Timer:
        return self.timers.set_interval(interval, callback, *params)

    def cancel_timer(self, timer: Timer) -> None:
        self.timers.cancel_timer(timer)

    def next_tick(self, callback: Callable[..., Any], *params: Any) -> Deferred:
        return self.timers.next_tick(callback, *params)

    def throttle_by_id(self, id: Any, timeout: float, callable: Callable[[], Any]) -> Deferred:
        return self.throttler.throttle_by_id(id, timeout, callable)

    def throttle(self, timeout: float, callable: Callable[[], Any]) -> Deferred:
        return self.throttler.throttle(timeout, callable)

    def debounce_by_id(self, id: Any, timeout: float, callable: Callable[[], Any]) -> Deferred:
        return self.debouncer.debounce_by_id(id, timeout, callable)

    def debounce(self, timeout: float, callable: Callable[[], Any]) -> Deferred:
        return self.debouncer.debounce(timeout, callable)

    def call(self, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return self.invoker.call(callback, *args, **kwargs)

    def get_stats(self) -> Dict[str, Any]:
        """Get scheduler statistics."""
        return {
            "pending_timers": self.loop.pending_timers,
            "throttled_keys": len(self.throttler),
            "debounced_keys": len(self.debouncer),
            "swallowed_errors": self.timers.swallowed_errors,
            "invocation_depth": self.invoker.depth,
        }


# Global instance
_scheduler: Optional[Scheduler] = None


def get_scheduler() -> Scheduler:
    """Get or create global scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = Scheduler(invoker=get_invoker())
    return _scheduler


def set_timeout(interval: float, callback: Callable[..., Any], *params: Any) -> Timer:
    """Run ``callback(*params)`` once after ``interval`` seconds.

    Failures raised by the callback are logged and swallowed.
    """
    return get_scheduler().set_timeout(interval, callback, *params)


def set_interval(interval: float, callback: Callable[..., Any], *params: Any) -> Timer:
    """Run ``callback(*params, timer)`` every ``interval`` seconds.

    The timer is passed last so the callback can cancel it. The first failing
    tick ends the series.
    """
    return get_scheduler().set_interval(interval, callback, *params)


def cancel_timer(timer: Timer) -> None:
    """Cancel a timer. Cancelling a fired or cancelled timer does nothing."""
    get_scheduler().cancel_timer(timer)


def next_tick(callback: Callable[..., Any], *params: Any) -> Deferred:
    """Run ``callback(*params)`` on the next loop iteration."""
    return get_scheduler().next_tick(callback, *params)


def throttle_by_id(id: Any, timeout: float, callable: Callable[[], Any]) -> Deferred:
    """Run ``callable`` at most once per ``timeout`` window opened by the first call for ``id``."""
    return get_scheduler().throttle_by_id(id, timeout, callable)


def throttle(timeout: float, callable: Callable[[], Any]) -> Deferred:
    """Like ``throttle_by_id`` with the callable's fingerprint as id."""
    return get_scheduler().throttle(timeout, callable)


def debounce_by_id(id: Any, timeout: float, callable: Callable[[], Any]) -> Deferred:
    """Run the latest ``callable`` for ``id`` after ``timeout`` quiet seconds."""
    return get_scheduler().debounce_by_id(id, timeout, callable)


def debounce(timeout: float, callable: Callable[[], Any]) -> Deferred:
    """Like ``debounce_by_id`` with the callable's fingerprint as id."""
    return get_scheduler().debounce(timeout, callable)


def throttled(timeout: float, key: Optional[str] = None, scheduler: Optional[Scheduler] = None):
    """Decorator that throttles every call of a function.

    Usage:
        @throttled(0.5)
        def refresh():
            ...

        refresh()  # returns a Deferred shared by calls in the window
    """
    def decorator(func: Callable[..., Any]):
        func_key = key or fetch_callable_unique_id(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Deferred:
            target = scheduler or get_scheduler()
            return target.throttle_by_id(func_key, timeout, functools.partial(func, *args, **kwargs))
        return wrapper
    return decorator


def debounced(timeout: float, key: Optional[str] = None, scheduler: Optional[Scheduler] = None):
    """Decorator that debounces every call of a function.

    The arguments of the most recent call are the ones the function runs with.
    """
    def decorator(func: Callable[..., Any]):
        func_key = key or fetch_callable_unique_id(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Deferred:
            target = scheduler or get_scheduler()
            return target.debounce_by_id(func_key, timeout, functools.partial(func, *args, **kwargs))
        return wrapper
    return decorator
