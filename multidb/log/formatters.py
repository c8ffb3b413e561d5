"""
Log formatter rendering structured extra fields.

Output layout:
    [12:34:56,789] [I] message          [key:value] [key:value] [1234] [/db/registry]
"""

import collections
import logging
from typing import Any

from .config import LogConfig
from .constants import LogConstants


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


def _extra_items(record: logging.LogRecord) -> list[tuple[str, Any]]:
    extra = getattr(record, LogConstants.EXTRA_ATTR, None)
    if not extra:
        return []
    keys = list(extra.keys())
    if not isinstance(extra, collections.OrderedDict):
        keys = sorted(keys)
    return [(k, extra[k]) for k in keys]


class LogFormatter(logging.Formatter):
    """Formatter for multidb loggers, with optional ANSI colors."""

    def __init__(self, config: LogConfig) -> None:
        super().__init__(LogConstants.DEFAULT_FORMAT)
        self._config = config

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, "%H:%M:%S")
        if self._config.micros:
            s += f",{int(record.msecs):03d}{int((record.created % 1) * 1e6) % 1000:03d}"
        else:
            s += f",{int(record.msecs):03d}"
        return s

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record)
        head = LogConstants.DEFAULT_FORMAT % record.__dict__

        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        parts = [head + " " * max(1, rule - len(head))]

        exception = None
        fields = []
        for key, value in _extra_items(record):
            if key == "exception" and isinstance(value, BaseException):
                exception = value
                fields.append(f"[{key}:{value.__class__.__name__}]")
            else:
                fields.append(f"[{key}:{_format_value(value)}]")
        meta = f"[{record.process}] [{record.name}]"

        if self._config.colors:
            col = LogConstants.COLORS.get(record.levelno, "")
            line = (
                col
                + parts[0]
                + " ".join(fields)
                + (" " if fields else "")
                + LogConstants.GRAY
                + meta
                + LogConstants.RESET
            )
        else:
            line = parts[0] + " ".join(fields) + (" " if fields else "") + meta

        if exception is not None:
            line += f"\n    {exception.__class__.__name__}: {exception}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line
