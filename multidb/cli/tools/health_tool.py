"""Connection health checks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...exceptions import DatabaseNotFoundError
from ..output import format_table
from ..tool import Tool, ToolConfig

if TYPE_CHECKING:
    from argparse import ArgumentParser


class HealthTool(Tool):
    """Probe one or all databases and print a pass/fail table."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(
            name="health",
            help_text="Check database connections",
            description=(
                "Connect to each database and run a trivial query. "
                "Exits with 1 if any database is unhealthy."
            ),
        )

    def add_args(self, parser: ArgumentParser) -> None:
        parser.add_argument("name", nargs="?", help="check only this database")

    def run(self, **kwargs: Any) -> int:
        name = kwargs.get("name")
        checker = self.service.health

        if name:
            known = self.service.all_names()
            if name not in known:
                raise DatabaseNotFoundError(name, available=known)
            results = {name: checker.check_one(name)}
        else:
            results = checker.check()

        rows = [(db, "healthy" if ok else "UNHEALTHY") for db, ok in results.items()]
        for line in format_table(rows):
            self.out.write(line)
        healthy = sum(results.values())
        self.out.write(f"{healthy}/{len(results)} databases healthy")
        return 0 if healthy == len(results) else 1
