"""Throttling keyed by id.

The first call for a key schedules the callable to run after the timeout.
Calls for the same key before it runs get the same future back and have no
other effect.
"""
import logging
from typing import Any, Callable

from ..core.deferred import Deferred
from ..core.identity import fetch_callable_unique_id
from .timers import Timers

logger = logging.getLogger(__name__)


class Throttler:
    """Registry of in-flight throttled calls, at most one per key."""

    def __init__(self, timers: Timers):
        self._timers = timers
        self._pending: dict[str, Deferred] = {}

    def __contains__(self, key: object) -> bool:
        return str(key) in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def pending_keys(self) -> list[str]:
        return list(self._pending)

    def throttle_by_id(self, id: Any, timeout: float, callable: Callable[[], Any]) -> Deferred:
        """Run ``callable`` once, ``timeout`` seconds after the first call for ``id``.

        Every caller shares the returned future, so cancelling it cancels the
        call for all of them. This includes a timeout from ``asyncio.wait_for``.
        Wrap the future in ``asyncio.shield`` to time out a single caller.

        Returns:
            The future shared by every call for ``id`` until it settles
        """
        key = str(id)
        timeout = float(timeout)

        pending = self._pending.get(key)
        if pending is not None:
            return pending

        deferred = self._timers.create_deferred(
            lambda: self._forget(key, deferred),
            "throttle_by_id() was cancelled",
        )

        def run():
            self._forget(key, deferred)
            if not deferred.done():
                self._timers.settle(deferred, callable)

        timer = self._timers.set_timeout(timeout, run)

        def cleanup():
            self._forget(key, deferred)
            self._timers.cancel_timer(timer)

        deferred.always(cleanup)
        self._pending[key] = deferred
        logger.debug(f"Throttling '{key}' for {timeout}s")
        return deferred

    def throttle(self, timeout: float, callable: Callable[[], Any]) -> Deferred:
        """Throttle keyed by the callable's fingerprint."""
        return self.throttle_by_id(fetch_callable_unique_id(callable), timeout, callable)

    def _forget(self, key: str, deferred: Deferred) -> None:
        if self._pending.get(key) is deferred:
            del self._pending[key]
