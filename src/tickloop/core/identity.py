"""Stable fingerprints for callables.

Used as the default coalescing key by ``throttle`` and ``debounce``. Callers
that need a deterministic key should pass one explicitly to the ``*_by_id``
variants; derived keys are a convenience.
"""
import hashlib
import inspect
import logging
import types
import uuid
from typing import Any, Callable

logger = logging.getLogger(__name__)


def _digest(*items: Any, sep: str = "|") -> str:
    data = sep.join(str(item) for item in items)
    return hashlib.md5(data.encode(), usedforsecurity=False).hexdigest()


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _source_span(func: types.FunctionType) -> tuple[str, int, int]:
    code = func.__code__
    lines = [line for _, _, line in code.co_lines() if line is not None]
    last = max(lines, default=code.co_firstlineno)
    return code.co_filename, code.co_firstlineno, last


def fetch_callable_unique_id(callback: Callable[..., Any] | str) -> str:
    """Return a 32 character hex fingerprint for ``callback``.

    - functions and lambdas hash their source file and line span
    - name strings, classes and builtins hash their name
    - methods bound to an instance hash the type, the instance identity and
      the method name, so two instances never collide
    - methods bound to a class hash the class and the method name
    - anything else gets a random fingerprint and will not coalesce
    """
    if isinstance(callback, str):
        return _digest(callback)

    if inspect.isfunction(callback):
        return _digest(*_source_span(callback))

    if inspect.ismethod(callback):
        owner = callback.__self__
        name = callback.__func__.__name__
        if inspect.isclass(owner):
            return _digest(_qualified_name(owner), name, sep="@")
        return _digest(_qualified_name(type(owner)), id(owner), name, sep="@")

    if inspect.isbuiltin(callback):
        owner = getattr(callback, "__self__", None)
        if owner is None or inspect.ismodule(owner):
            module = getattr(callback, "__module__", None) or "builtins"
            return _digest(f"{module}.{callback.__qualname__}")
        return _digest(_qualified_name(type(owner)), id(owner), callback.__name__, sep="@")

    if inspect.isclass(callback):
        return _digest(_qualified_name(callback))

    if inspect.isfunction(getattr(type(callback), "__call__", None)):
        return _digest(_qualified_name(type(callback)), id(callback), "__call__", sep="@")

    logger.warning(
        f"No stable identity for {callback!r}; a random key is used and calls will not coalesce"
    )
    return _digest(uuid.uuid4().hex)
