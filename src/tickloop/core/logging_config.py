"""Logging configuration for tickloop.

The package only creates loggers; handlers are attached by ``setup_logging``
when an application asks for them.
"""
import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import load_config


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    log_dir: Path = Path.home() / ".tickloop" / "logs"
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    console_output: bool = True
    file_output: bool = False


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs structured log records."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured fields."""
        base = f"[{self.formatTime(record)}] [{record.levelname}] [{record.name}]"

        context = getattr(record, "context", {})
        if context:
            context_str = " ".join(f"{k}={v}" for k, v in context.items())
            base += f" [{context_str}]"

        base += f" {record.getMessage()}"

        if record.exc_info:
            base += f"\n{self.formatException(record.exc_info)}"

        return base


class ContextFilter(logging.Filter):
    """Filter that adds context to log records."""

    def __init__(self, default_context: dict[str, Any] | None = None):
        super().__init__()
        self.default_context = default_context or {}

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default context to record."""
        if not hasattr(record, "context"):
            record.context = {}
        record.context = {**self.default_context, **record.context}
        return True


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Attach handlers to the ``tickloop`` logger.

    Args:
        config: Logging configuration. Defaults to TICKLOOP_LOG_LEVEL on stderr.

    Returns:
        The root tickloop logger
    """
    if config is None:
        config = LoggingConfig(level=load_config().log_level)

    logger = logging.getLogger("tickloop")
    logger.setLevel(getattr(logging, config.level.upper()))
    logger.handlers = []

    formatter = StructuredFormatter()

    if config.console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(ContextFilter())
        logger.addHandler(console_handler)

    if config.file_output:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            config.log_dir / "tickloop.log",
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(ContextFilter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name (will be prefixed with 'tickloop.')

    Returns:
        Logger instance
    """
    return logging.getLogger(f"tickloop.{name}")


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    exc_info: BaseException | bool | None = None,
    **context: Any,
) -> None:
    """Log a message with additional context.

    Args:
        logger: The logger to use
        level: Log level (e.g., logging.INFO)
        message: The log message
        exc_info: Exception to attach, if any
        **context: Additional context fields
    """
    logger.log(level, message, exc_info=exc_info, extra={"context": context})
