"""
tickloop scheduler - timers, next-tick, throttling and debouncing.
"""

from .debounce import Debouncer
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
from .throttle import Throttler
from .timers import Timers

__all__ = [
    "Scheduler",
    "get_scheduler",
    "Timers",
    "Throttler",
    "Debouncer",
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
]
