"""Cancellable single-assignment future."""
import asyncio
from typing import Any, Callable


class Deferred(asyncio.Future):
    """An ``asyncio.Future`` with a cancellation hook and completion hooks.

    The cancellation hook runs once, synchronously, when ``cancel()`` is called
    on a pending future. Hooks registered with ``always()`` run synchronously
    when the future resolves, rejects or is cancelled. Only the first
    settlement takes effect; ``resolve``/``reject`` on a done future are no-ops.
    """

    def __init__(
        self,
        canceller: Callable[[], Any] | None = None,
        *,
        reason: str = "operation was cancelled",
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        super().__init__(loop=loop)
        self._canceller = canceller
        self._reason = reason
        self._always: list[Callable[[], Any]] = []

    @property
    def reason(self) -> str:
        """Message carried by the ``CancelledError`` of a cancelled future."""
        return self._reason

    def resolve(self, value: Any = None) -> None:
        if not self.done():
            self.set_result(value)

    def reject(self, exc: BaseException) -> None:
        if not self.done():
            self.set_exception(exc)

    def always(self, hook: Callable[[], Any]) -> None:
        """Run ``hook`` once the future settles, whatever the outcome."""
        if self.done():
            hook()
        else:
            self._always.append(hook)

    def set_result(self, result: Any) -> None:
        super().set_result(result)
        self._finalize()

    def set_exception(self, exception: BaseException) -> None:
        super().set_exception(exception)
        self._finalize()

    def cancel(self, msg: Any = None) -> bool:
        if self.done():
            return False
        canceller, self._canceller = self._canceller, None
        try:
            if canceller is not None:
                canceller()
        finally:
            cancelled = super().cancel(msg=msg if msg is not None else self._reason)
            if cancelled:
                self._finalize()
        return cancelled

    def _finalize(self) -> None:
        self._canceller = None
        hooks, self._always = self._always, []
        for hook in hooks:
            hook()
