"""Shared test fixtures."""

import asyncio
import logging
import os

import pytest
import pytest_asyncio

from tickloop.core.config import TimingConfig
from tickloop.core.errors import ErrorContext
from tickloop.core.eventloop import EventLoop
from tickloop.scheduler import Scheduler


@pytest.fixture
def errors() -> list[ErrorContext]:
    """Collects contexts passed to a scheduler's on_error hook."""
    return []


@pytest_asyncio.fixture
async def scheduler(errors) -> Scheduler:
    """A fresh scheduler bound to the test's running loop."""
    return Scheduler(
        event_loop=EventLoop(asyncio.get_running_loop()),
        config=TimingConfig(),
        on_error=errors.append,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove TICKLOOP_* variables from the environment."""
    for name in list(os.environ):
        if name.startswith("TICKLOOP_"):
            monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def tickloop_logger():
    """The package logger, with handlers and level restored afterwards."""
    logger = logging.getLogger("tickloop")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)
