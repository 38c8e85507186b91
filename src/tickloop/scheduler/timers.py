"""Timer primitives: one-shot, periodic and next-tick scheduling.

Every callback runs through the safe invoker. ``set_timeout`` and
``set_interval`` have no channel to report failures, so they log and swallow
them; a failing periodic callback also ends its series. ``next_tick`` and the
coalescing engines report through a ``Deferred`` instead.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional

from ..core.config import TimingConfig
from ..core.deferred import Deferred
from ..core.errors import ErrorContext, ErrorSeverity
from ..core.eventloop import EventLoop, Timer
from ..core.invoke import SafeInvoker
from ..core.logging_config import get_logger, log_with_context

logger = get_logger("timers")


def describe(callback: Any) -> str:
    """Short printable name for a callback."""
    return getattr(callback, "__qualname__", None) or repr(callback)


class Timers:
    """Schedules callbacks on an ``EventLoop`` through a ``SafeInvoker``."""

    def __init__(
        self,
        event_loop: EventLoop,
        invoker: SafeInvoker,
        config: TimingConfig,
        on_error: Optional[Callable[[ErrorContext], None]] = None,
    ):
        self.loop = event_loop
        self.invoker = invoker
        self.config = config
        self.on_error = on_error
        self.swallowed_errors = 0
        # Strong references to tasks spawned for awaitable results
        self._tasks: set[asyncio.Future] = set()

    def create_deferred(self, canceller: Callable[[], Any], reason: str) -> Deferred:
        deferred = Deferred(canceller, reason=reason, loop=self.loop.asyncio_loop)

        def retrieve():
            # Marks the exception retrieved; awaiting still raises it
            if not deferred.cancelled() and deferred.exception() is not None:
                logger.debug(f"Future rejected: {deferred.exception()!r}")

        deferred.always(retrieve)
        return deferred

    def set_timeout(self, interval: float, callback: Callable[..., Any], *params: Any) -> Timer:
        """Run ``callback(*params)`` once after ``interval`` seconds."""

        def fire():
            try:
                result = self.invoker.call(callback, *params)
            except Exception as e:
                self._swallow("set_timeout", callback, e)
                return
            if inspect.isawaitable(result):
                self._watch("set_timeout", callback, result)

        return self.loop.add_timer(float(interval), fire)

    def set_interval(self, interval: float, callback: Callable[..., Any], *params: Any) -> Timer:
        """Run ``callback(*params, timer)`` every ``interval`` seconds.

        The first failing tick cancels the timer. An awaitable result holds
        back the next tick until it finishes.
        """
        interval = max(float(interval), self.config.min_periodic_interval)

        def tick(timer: Timer):
            try:
                result = self.invoker.call(callback, *params, timer)
            except Exception as e:
                self.cancel_timer(timer)
                self._swallow("set_interval", callback, e, timer)
                return None
            if inspect.isawaitable(result):
                return self._watch("set_interval", callback, result, timer)
            return None

        return self.loop.add_periodic_timer(interval, tick)

    def cancel_timer(self, timer: Timer) -> None:
        self.loop.cancel_timer(timer)

    def next_tick(self, callback: Callable[..., Any], *params: Any) -> Deferred:
        """Run ``callback(*params)`` on the next loop iteration.

        Returns a future for the result. Cancelling it before the iteration
        arrives keeps the callback from running.
        """
        runnable = True

        def on_cancel():
            nonlocal runnable
            runnable = False

        deferred = self.create_deferred(on_cancel, "next_tick() was cancelled")

        def run():
            if runnable:
                self.settle(deferred, callback, *params)

        self.loop.future_tick(run)
        return deferred

    def settle(self, deferred: Deferred, callback: Callable[..., Any], *params: Any) -> None:
        """Invoke ``callback`` and settle ``deferred`` with the outcome."""
        try:
            result = self.invoker.call(callback, *params)
        except Exception as e:
            deferred.reject(e)
            return
        if inspect.isawaitable(result):
            self._adopt(deferred, result)
        else:
            deferred.resolve(result)

    def _spawn(self, awaitable: Awaitable[Any]) -> asyncio.Future:
        task = asyncio.ensure_future(awaitable, loop=self.loop.asyncio_loop)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _adopt(self, deferred: Deferred, awaitable: Awaitable[Any]) -> None:
        task = self._spawn(awaitable)

        def copy(done: asyncio.Future):
            if deferred.done():
                return
            if done.cancelled():
                deferred.cancel()
            elif done.exception() is not None:
                deferred.reject(done.exception())
            else:
                deferred.resolve(done.result())

        def abandon():
            if not task.done():
                task.cancel()

        task.add_done_callback(copy)
        deferred.always(abandon)

    def _watch(
        self,
        operation: str,
        callback: Callable[..., Any],
        awaitable: Awaitable[Any],
        timer: Optional[Timer] = None,
    ) -> asyncio.Future:
        def check(done: asyncio.Future):
            if done.cancelled():
                return
            exc = done.exception()
            if exc is None:
                return
            if timer is not None:
                self.cancel_timer(timer)
            self._swallow(operation, callback, exc, timer)

        task = self._spawn(awaitable)
        task.add_done_callback(check)
        return task

    def _swallow(
        self,
        operation: str,
        callback: Callable[..., Any],
        exc: BaseException,
        timer: Optional[Timer] = None,
    ) -> None:
        self.swallowed_errors += 1
        # A periodic failure ends the series
        periodic = timer is not None and timer.periodic
        severity = ErrorSeverity.ERROR if periodic else ErrorSeverity.WARNING
        context = ErrorContext(
            operation=operation,
            severity=severity,
            message=f"Error in {operation} callback: {exc}",
            exception=exc,
            callback=callback,
            metadata={"interval": timer.interval} if timer is not None else None,
        )
        if self.config.log_swallowed_errors:
            log_with_context(
                logger,
                logging.ERROR if severity is ErrorSeverity.ERROR else logging.WARNING,
                context.message,
                exc_info=exc,
                operation=operation,
                callback=describe(callback),
            )
        if self.on_error:
            self.on_error(context)
