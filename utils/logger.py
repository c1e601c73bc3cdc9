"""
Logging utilities for the guild assistant bot.
Uses Rich for colored console output.
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Custom theme for logging
CUSTOM_THEME = Theme({
    "logging.level.success": "green",
    "logging.level.command": "cyan",
    "logging.level.debug": "dim cyan",
})

console = Console(theme=CUSTOM_THEME)

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Level applied to loggers created without an explicit level
_default_level: int = logging.INFO


def parse_level(level: Union[str, int]) -> int:
    """
    Convert a level name or number to a logging level.

    Args:
        level: Level name (case-insensitive) or numeric level

    Returns:
        Numeric logging level

    Raises:
        ValueError: If the name is not a known level
    """
    if isinstance(level, int):
        return level

    name = str(level).strip().upper()
    if name == "WARN":
        name = "WARNING"
    if name not in LEVEL_NAMES:
        raise ValueError(f"Unknown log level: {level}")
    return getattr(logging, name)


def set_default_level(level: Union[str, int]) -> None:
    """
    Set the level for new loggers and re-level existing ones.

    Args:
        level: Level name or number
    """
    global _default_level
    _default_level = parse_level(level)

    for logger in list(logging.Logger.manager.loggerDict.values()):
        if isinstance(logger, logging.Logger) and getattr(logger, "_rich_managed", False):
            logger.setLevel(_default_level)
            for handler in logger.handlers:
                handler.setLevel(_default_level)


def get_default_level() -> int:
    """Get the level used for new loggers."""
    return _default_level


def setup_logging(name: str, level: Optional[Union[str, int]] = None) -> logging.Logger:
    """
    Set up a logger with RichHandler.

    Args:
        name: Logger name
        level: Logging level (default: the configured default level)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    resolved = _default_level if level is None else parse_level(level)

    logger.setLevel(resolved)
    logger.propagate = False

    # Remove existing handlers
    logger.handlers = []

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(resolved)

    formatter = logging.Formatter(
        fmt="[%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger._rich_managed = True

    return logger


class LoggerMixin:
    """Mixin class that provides logger functionality."""

    def __init__(self, name: str):
        self._logger = setup_logging(name)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message."""
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message."""
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message."""
        self._logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log error message."""
        self._logger.error(message, extra=kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Log success message (custom level)."""
        # Use info level but prefix with [SUCCESS]
        self._logger.info(f"[SUCCESS] {message}", extra=kwargs)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    logger = logging.getLogger(name)
    if getattr(logger, "_rich_managed", False):
        return logger
    return setup_logging(name)
