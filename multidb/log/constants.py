"""
Constants for the logging system.
"""

import logging


class LogConstants:
    """Constants for the logging system."""

    # Default format string (extras, pid and logger name are appended)
    DEFAULT_FORMAT: str = "[%(asctime)s] [%(levelname).1s] %(message)s"

    # Column the extra fields are aligned to
    DEFAULT_RULE_WIDTH: int = 70
    MICRO_RULE_WIDTH: int = 74

    # Custom log levels
    CUSTOM_LEVELS: dict[str, int] = {"TRACE": 5}

    LEVEL_NAMES: dict[str, int | bool] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "trace": 5,
        "false": False,  # Special value to disable all logging
    }

    # Record attribute holding the merged structured fields
    EXTRA_ATTR: str = "__multidb__extra"

    # ANSI escape sequences
    RESET: str = "\x1b[0m"
    GRAY: str = "\x1b[38;5;241m"
    COLORS: dict[int, str] = {
        5: "\x1b[38;5;244m",
        logging.DEBUG: "\x1b[38;5;32m",
        logging.INFO: "\x1b[36m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[35m",
    }
