"""
Logger class carrying structured extra fields.
"""

import collections
import logging
import sys
from typing import Any

from .config import LogConfig
from .constants import LogConstants


class Logger(logging.Logger):
    """
    Logger with structured extra fields and "view" loggers.

    Extends the standard Python logger with:
    - Merging of pre-populated and per-call ``extra`` fields, stored on the
      record for the formatter
    - Derived loggers that delegate to the root logger's handlers
    - A custom TRACE level
    """

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: dict[str, Any] | None = None,
    ):
        if config is None:
            config = LogConfig()

        if config.level is False:
            super().__init__(name, logging.CRITICAL + 1)
            self._logging_disabled = True
        else:
            super().__init__(name, config.level)
            self._logging_disabled = False

        self._config = config
        self._extra = extra or {}
        self._root_logger: Logger | None = None  # Set for derived "view" loggers

    @property
    def config(self) -> LogConfig:
        return self._config

    @property
    def disabled(self) -> bool:  # type: ignore[override]
        return self._logging_disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._logging_disabled = value

    def isEnabledFor(self, level: int) -> bool:
        """Check if enabled, respecting the levels of our ancestor loggers."""
        if not super().isEnabledFor(level):
            return False
        if self.parent and hasattr(self.parent, "_root_logger"):
            return self.parent.isEnabledFor(level)
        return True

    def setLevel(self, level: int | str) -> None:
        super().setLevel(level)
        self._cache.clear()  # type: ignore[attr-defined]

    def makeRecord(  # type: ignore[override]
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: str,
        args: tuple,
        exc_info: Any | None,
        func: str | None = None,
        extra: dict[str, Any] | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        """Create log record, keeping the merged extra fields on the record."""
        merged: dict[str, Any]
        if isinstance(extra, collections.OrderedDict):
            merged = collections.OrderedDict(self._extra)
        else:
            merged = dict(self._extra)
        if extra:
            merged.update(extra)

        # Standard LogRecord attributes cannot be overwritten through extra
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func=func, extra=None, sinfo=sinfo
        )
        setattr(record, LogConstants.EXTRA_ATTR, merged)
        return record

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a TRACE level message."""
        trace_level = LogConstants.CUSTOM_LEVELS["TRACE"]
        if self.isEnabledFor(trace_level):
            self._log(trace_level, msg, args, **kwargs)

    def _log(self, level: int, msg: str, args: tuple, **kwargs: Any) -> None:  # type: ignore[override]
        if self._logging_disabled:
            return
        try:
            super()._log(level, msg, args, **kwargs)
        except (TypeError, ValueError) as e:
            msg_preview = msg[:80] + "..." if len(msg) > 80 else msg
            sys.stderr.write(
                f"LOG_FORMAT_ERROR [{self.name}]: {e.__class__.__name__}: {e} "
                f"| msg={msg_preview!r} args={args!r}\n"
            )

    def callHandlers(self, record: logging.LogRecord) -> None:
        """Delegate derived loggers' records to the root logger's handlers."""
        if self._root_logger is not None:
            for handler in self._root_logger.handlers:
                if record.levelno >= handler.level:
                    handler.handle(record)
        else:
            super().callHandlers(record)
