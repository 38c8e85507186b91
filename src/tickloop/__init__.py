"""
tickloop - timing primitives for a single-threaded asyncio loop.

Delayed and periodic execution, next-iteration callbacks, and throttling and
debouncing keyed by id or by callable identity.
"""

from .core import (
    Deferred,
    ErrorContext,
    ErrorSeverity,
    EventLoop,
    InvocationFault,
    LoggingConfig,
    SafeInvoker,
    TickloopError,
    Timer,
    TimingConfig,
    call,
    fetch_callable_unique_id,
    get_logger,
    load_config,
    loop,
    setup_logging,
)
from .scheduler import (
    Scheduler,
    cancel_timer,
    debounce,
    debounce_by_id,
    debounced,
    get_scheduler,
    next_tick,
    set_interval,
    set_timeout,
    throttle,
    throttle_by_id,
    throttled,
)

__version__ = "0.1.0"

__all__ = [
    "loop",
    "EventLoop",
    "Timer",
    "Deferred",
    "call",
    "SafeInvoker",
    "fetch_callable_unique_id",
    "set_timeout",
    "set_interval",
    "cancel_timer",
    "next_tick",
    "throttle",
    "throttle_by_id",
    "debounce",
    "debounce_by_id",
    "throttled",
    "debounced",
    "Scheduler",
    "get_scheduler",
    "TimingConfig",
    "load_config",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
    "TickloopError",
    "InvocationFault",
    "ErrorContext",
    "ErrorSeverity",
]
