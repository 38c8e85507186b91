"""Configuration for tickloop.

Settings come from environment variables, optionally layered over a .env
file. Environment variables always win over the file.
"""
import logging
import os
from pathlib import Path
from typing import Any, Literal

from dotenv import dotenv_values
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "TICKLOOP_"


class TimingConfig(BaseModel):
    """Runtime settings for the scheduling primitives."""

    # Convert warnings raised inside call() into InvocationFault
    convert_warnings: bool = True
    min_periodic_interval: float = Field(default=0.000001, gt=0)
    log_swallowed_errors: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


def _read_env(source: dict[str, Any]) -> dict[str, Any]:
    values = {}
    for name in TimingConfig.model_fields:
        raw = source.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw != "":
            values[name] = raw
    return values


def load_config(env_file: Path | None = None) -> TimingConfig:
    """Load configuration.

    Priority order:
    1. Environment variables (TICKLOOP_CONVERT_WARNINGS, ...)
    2. The given .env file
    3. Defaults

    Raises:
        pydantic.ValidationError: If a value cannot be parsed
    """
    values: dict[str, Any] = {}
    if env_file is not None and env_file.exists():
        values.update(_read_env(dotenv_values(env_file)))
        logger.debug(f"Loaded settings from {env_file}")
    values.update(_read_env(os.environ))
    return TimingConfig(**values)
