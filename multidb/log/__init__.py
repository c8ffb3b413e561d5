"""
Logging for multidb.

Extends Python's standard logging with:
- Structured ``extra`` fields rendered as ``[key:value]``
- Hierarchical "view" loggers (``/db/registry``) sharing the root's handlers
- A custom TRACE level
- Optional colored console output

Log Level Control:
- Standard levels: debug, info, warning, error, critical
- Custom level: trace
- Disable logging completely: False or "false"
"""

import logging
from typing import TextIO

from .config import LogConfig
from .constants import LogConstants
from .factory import LoggerFactory
from .logger import Logger

logging.addLevelName(LogConstants.CUSTOM_LEVELS["TRACE"], "TRACE")


class InvalidLogLevelError(ValueError):
    """Raised when a log level name cannot be resolved."""

    def __init__(self, level: object) -> None:
        super().__init__(f"Invalid log level: {level}")
        self.level = level


def resolve_level(s: str | int | bool) -> int | bool:
    """
    Resolve log level from string, numeric value, or boolean.

    Raises:
        InvalidLogLevelError: If the log level is invalid
    """
    if isinstance(s, bool):
        return s
    if isinstance(s, int):
        return s
    if s.isnumeric():
        return int(s)
    if s.lower() in LogConstants.LEVEL_NAMES:
        return LogConstants.LEVEL_NAMES[s.lower()]
    raise InvalidLogLevelError(s)


def create_root_lg(
    level: str | int | bool = "info",
    colors: bool = True,
    micros: bool = False,
    stream: TextIO | None = None,
) -> Logger:
    """
    Create a root logger with the specified configuration.

    Example:
        >>> lg = create_root_lg("debug", colors=False)
    """
    return LoggerFactory.create_root(
        LogConfig.from_params(level, micros=micros, colors=colors), stream=stream
    )


__all__ = [
    "Logger",
    "LoggerFactory",
    "LogConfig",
    "LogConstants",
    "InvalidLogLevelError",
    "resolve_level",
    "create_root_lg",
]
