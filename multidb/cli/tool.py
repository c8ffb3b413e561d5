"""
Base tool class for CLI commands.

Each subcommand is a Tool: it declares its arguments in add_args() and does
its work in run(), returning the process exit code.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..config import Config
from ..db.models import BulkResult
from ..log import Logger
from .output import OutputWriter, format_table

if TYPE_CHECKING:
    from ..db.service import DatabaseService


@dataclass
class ToolConfig:
    """Configuration for a tool."""

    name: str
    aliases: list[str] = field(default_factory=list)
    help_text: str = ""
    description: str = ""


@dataclass
class ToolContext:
    """Everything a tool needs at run time. The service is built on first use."""

    lg: Logger
    cfg: Config
    out: OutputWriter
    env: Mapping[str, str] | None = None
    clients_root: Path | None = None
    schemas_root: Path | None = None
    confirm: Callable[[str], bool] | None = None

    @cached_property
    def service(self) -> DatabaseService:
        from ..db.service import DatabaseService

        service = DatabaseService.from_config(
            self.cfg,
            self.lg,
            env=self.env,
            clients_root=self.clients_root,
            schemas_root=self.schemas_root,
        )
        service.bootstrap()
        return service

    def close(self) -> None:
        if "service" in self.__dict__:
            self.service.close()


class Tool:
    """
    Base class for CLI commands.

    Subclasses provide a ToolConfig (through the constructor or
    _create_config()) and implement run().
    """

    def __init__(self, config: ToolConfig | None = None) -> None:
        self.config = config or self._create_config()
        self._ctx: ToolContext | None = None

    def _create_config(self) -> ToolConfig:
        raise NotImplementedError(f"{self.__class__.__name__} must define a ToolConfig")

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def cmd(self) -> tuple[list[str], dict[str, Any]]:
        """Positional and keyword arguments for ``subparsers.add_parser``."""
        return [self.name], {
            "aliases": self.config.aliases,
            "help": self.config.help_text,
            "description": self.config.description or self.config.help_text,
        }

    def bind(self, ctx: ToolContext) -> Tool:
        self._ctx = ctx
        return self

    @property
    def ctx(self) -> ToolContext:
        if self._ctx is None:
            raise RuntimeError(f"tool '{self.name}' is not bound to a context")
        return self._ctx

    @property
    def lg(self) -> Logger:
        return self.ctx.lg

    @property
    def out(self) -> OutputWriter:
        return self.ctx.out

    @property
    def service(self) -> DatabaseService:
        return self.ctx.service

    def add_args(self, parser: argparse.ArgumentParser) -> None:
        """Add command-line arguments. Override in subclasses."""

    def run(self, **kwargs: Any) -> int:
        raise NotImplementedError

    def report(self, result: BulkResult) -> int:
        """
        Print one row per database, then a summary.

        Returns:
            1 if any database failed, else 0
        """
        rows = [
            (r.name, "ok" if r.ok else "FAIL", r.error or "") for r in result
        ]
        for line in format_table(rows):
            self.out.write(line)
        self.out.write(
            f"{len(result.succeeded)}/{len(result)} databases: {result.operation} ok"
        )
        return 1 if result.any_failed else 0


class NameOrAllTool(Tool):
    """
    Tool acting on one database, or on every registered database.

    ``cmd <name>`` targets one database; ``cmd --all`` or a bare ``cmd``
    targets all of them.
    """

    def add_args(self, parser: argparse.ArgumentParser) -> None:
        group = parser.add_mutually_exclusive_group()
        group.add_argument("name", nargs="?", help="database name")
        group.add_argument(
            "--all", dest="all_dbs", action="store_true", help="all databases"
        )

    def run(self, **kwargs: Any) -> int:
        name = kwargs.get("name")
        if name:
            self.run_one(name, **kwargs)
            self.out.write(f"{name}: {self.name} ok")
            return 0
        return self.report(self.run_all(**kwargs))

    def run_one(self, name: str, **kwargs: Any) -> None:
        raise NotImplementedError

    def run_all(self, **kwargs: Any) -> BulkResult:
        raise NotImplementedError
