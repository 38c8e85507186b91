"""Error types for tickloop.

Failures raised by user callbacks are never wrapped: they propagate through
``call`` unchanged or reject the future of the operation that ran them. The
types here cover what the package itself adds on top of that.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = "warning"  # Swallowed, the loop keeps going
    ERROR = "error"      # Swallowed, and a periodic series ended


class TickloopError(Exception):
    """Base class for errors raised by tickloop."""


class InvocationFault(TickloopError):
    """A warning emitted inside ``call`` and converted into an exception."""

    def __init__(
        self,
        message: str,
        category: type[Warning] = UserWarning,
        filename: str | None = None,
        lineno: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.filename = filename
        self.lineno = lineno

    def __str__(self) -> str:
        where = f" ({self.filename}:{self.lineno})" if self.filename else ""
        return f"{self.category.__name__}: {self.message}{where}"


@dataclass
class ErrorContext:
    """Context for a callback failure that had no future to reject."""

    operation: str
    severity: ErrorSeverity
    message: str
    exception: Exception | None = None
    callback: Callable[..., Any] | None = None
    timestamp: float = field(default_factory=time.time)
    metadata: dict[str, Any] | None = None
