"""Safe invocation of user callbacks.

``call`` runs a callback so that warnings emitted while it runs surface as
``InvocationFault`` exceptions the caller can catch. The warnings interceptor
is installed by the outermost call only and restored when the last nested
call returns, so unrelated code never sees it.
"""
import logging
import warnings
from typing import Any, Callable, Optional

from .config import load_config
from .errors import InvocationFault

logger = logging.getLogger(__name__)


def _raise_fault(message, category, filename, lineno, file=None, line=None):
    raise InvocationFault(str(message), category, filename, lineno)


class SafeInvoker:
    """Runs callbacks with warnings converted into exceptions.

    Tracks how many ``call`` frames are on the stack; only the transition from
    zero to one installs the interceptor and only the transition back to zero
    removes it.
    """

    def __init__(self, convert_warnings: bool = True):
        self.convert_warnings = convert_warnings
        self._depth = 0
        self._guard: Optional[warnings.catch_warnings] = None

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def intercepting(self) -> bool:
        return self._guard is not None

    def call(self, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call ``callback(*args, **kwargs)`` and return its result.

        Exceptions raised by the callback, including converted warnings,
        propagate unchanged.
        """
        self._enter()
        try:
            return callback(*args, **kwargs)
        finally:
            self._exit()

    def _enter(self) -> None:
        if self._depth == 0 and self.convert_warnings:
            guard = warnings.catch_warnings()
            guard.__enter__()
            warnings.simplefilter("always")
            warnings.showwarning = _raise_fault
            self._guard = guard
            logger.debug("Installed warnings interceptor")
        self._depth += 1

    def _exit(self) -> None:
        self._depth -= 1
        if self._depth == 0 and self._guard is not None:
            guard, self._guard = self._guard, None
            guard.__exit__(None, None, None)
            logger.debug("Removed warnings interceptor")


# Global instance
_invoker: Optional[SafeInvoker] = None


def get_invoker() -> SafeInvoker:
    """Get or create the process-wide invoker."""
    global _invoker
    if _invoker is None:
        _invoker = SafeInvoker(convert_warnings=load_config().convert_warnings)
    return _invoker


def call(callback: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call a callback through the process-wide invoker."""
    return get_invoker().call(callback, *args, **kwargs)
