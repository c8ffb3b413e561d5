"""
Immutable configuration for loggers.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable configuration for root loggers.

    Derived loggers share the root's handler and formatter, so only the root
    config controls colors and timestamp precision.
    """

    level: int | bool = logging.INFO  # int for normal levels, False to disable logging
    micros: bool = False
    colors: bool = True

    @staticmethod
    def _resolve_level(level: str | int | bool) -> int | bool:
        from . import resolve_level

        if isinstance(level, bool):
            return False if not level else logging.INFO
        return resolve_level(level)

    @classmethod
    def from_params(
        cls,
        level: str | int | bool,
        micros: bool = False,
        colors: bool = True,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            micros: Whether to show millisecond precision
            colors: Whether to enable colored output

        Returns:
            LogConfig instance
        """
        return cls(level=cls._resolve_level(level), micros=micros, colors=colors)

    @classmethod
    def from_config(cls, section: Mapping[str, Any] | Any) -> LogConfig:
        """
        Create LogConfig from the ``logging`` section of a Config.

        Example:
            cfg = Config("etc/multidb.yaml")
            log_config = LogConfig.from_config(cfg.logging)
        """
        if section is None:
            return cls()
        level = section.get("level", "info")
        if level == "false":
            level = False
        return cls.from_params(
            level=level,
            micros=bool(section.get("micros", False)),
            colors=bool(section.get("colors", True)),
        )
