"""Debouncing keyed by id.

Every call for a key restarts its quiet window. When a window elapses without
another call, the callable of the most recent call runs once and settles the
future that every call in the window received.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..core.deferred import Deferred
from ..core.eventloop import Timer
from ..core.identity import fetch_callable_unique_id
from .timers import Timers

logger = logging.getLogger(__name__)


@dataclass
class _Pending:
    """Future and active timer for one debounced key."""

    deferred: Deferred
    timer: Optional[Timer] = None


class Debouncer:
    """Registry of debounced calls, one future and one active timer per key."""

    def __init__(self, timers: Timers):
        self._timers = timers
        self._pending: dict[str, _Pending] = {}

    def __contains__(self, key: object) -> bool:
        return str(key) in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def pending_keys(self) -> list[str]:
        return list(self._pending)

    def debounce_by_id(self, id: Any, timeout: float, callable: Callable[[], Any]) -> Deferred:
        """Run ``callable`` once ``timeout`` seconds pass without another call for ``id``.

        Every caller shares the returned future, so cancelling it cancels the
        call for all of them. This includes a timeout from ``asyncio.wait_for``.
        Wrap the future in ``asyncio.shield`` to time out a single caller.

        Returns:
            The future shared by every call for ``id`` until it settles
        """
        key = str(id)
        timeout = float(timeout)

        entry = self._pending.get(key)
        if entry is not None:
            self._timers.cancel_timer(entry.timer)
            logger.debug(f"Restarting debounce window for '{key}'")
        else:
            entry = self._open(key)

        deferred = entry.deferred

        def run():
            self._forget(key, entry)
            if not deferred.done():
                self._timers.settle(deferred, callable)

        entry.timer = self._timers.set_timeout(timeout, run)
        self._pending[key] = entry
        return deferred

    def debounce(self, timeout: float, callable: Callable[[], Any]) -> Deferred:
        """Debounce keyed by the callable's fingerprint."""
        return self.debounce_by_id(fetch_callable_unique_id(callable), timeout, callable)

    def _open(self, key: str) -> _Pending:
        deferred = self._timers.create_deferred(
            lambda: self._forget(key, entry),
            "debounce_by_id() was cancelled",
        )
        entry = _Pending(deferred)

        def cleanup():
            self._forget(key, entry)
            if entry.timer is not None:
                self._timers.cancel_timer(entry.timer)

        deferred.always(cleanup)
        return entry

    def _forget(self, key: str, entry: _Pending) -> None:
        if self._pending.get(key) is entry:
            del self._pending[key]
