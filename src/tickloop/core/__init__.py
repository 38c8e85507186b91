"""
tickloop core - event loop access, futures, safe invocation and callable identity.
"""

from .config import TimingConfig, load_config
from .deferred import Deferred
from .errors import ErrorContext, ErrorSeverity, InvocationFault, TickloopError
from .eventloop import EventLoop, Timer, loop
from .identity import fetch_callable_unique_id
from .invoke import SafeInvoker, call, get_invoker
from .logging_config import LoggingConfig, get_logger, setup_logging

__all__ = [
    "TimingConfig",
    "load_config",
    "Deferred",
    "ErrorContext",
    "ErrorSeverity",
    "InvocationFault",
    "TickloopError",
    "fetch_callable_unique_id",
    "SafeInvoker",
    "call",
    "get_invoker",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "EventLoop",
    "Timer",
    "loop",
]
