"""
Factory for creating root loggers and derived "view" loggers.
"""

import logging
import sys
from typing import Any, TextIO, cast

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(config: LogConfig, stream: TextIO | None = None) -> Logger:
        """
        Create the root logger ("/") with a console handler.

        Example:
            >>> lg = LoggerFactory.create_root(LogConfig.from_params("info"))
            >>> lg.info("started", extra={"databases": 3})
            [12:34:56,789] [I] started        [databases:3] [1234] [/]
        """
        return LoggerFactory.create("/", config, stream=stream)

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        extra: dict[str, Any] | None = None,
        stream: TextIO | None = None,
    ) -> Logger:
        """
        Create a logger owning its own console handler.

        Replaces any logger registered under the same name.
        """
        lg = Logger(name, config, extra)
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setLevel(
            logging.CRITICAL + 1 if config.level is False else cast(int, config.level)
        )
        handler.setFormatter(LogFormatter(config))
        lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root
        logging.root.manager.loggerDict[name] = lg
        return lg

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a "view" logger that delegates to root's handlers.

        Examples:
            >>> derived = LoggerFactory.derive(root, "db")
            >>> derived.name
            '/db'
            >>> LoggerFactory.derive(root, ["db", "registry"]).name
            '/db/registry'

        Args:
            parent: Parent logger instance
            tags: Single tag string OR list of tag strings to form hierarchy

        Returns:
            Derived logger sharing the root's handlers
        """
        if isinstance(tags, str):
            tags = [tags]

        # Plain loggers have no view support; hand them back as-is
        if not isinstance(parent, Logger):
            return parent

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(tags)

        root = parent._root_logger if parent._root_logger else parent
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger) and existing._root_logger is root:
            return existing

        lg = Logger(name, LogConfig(level=parent.config.level))
        lg.setLevel(logging.NOTSET)
        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False
        logging.root.manager.loggerDict[name] = lg
        return lg
