"""Generate, seed, setup, push and studio commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...db.models import BulkResult
from ..tool import NameOrAllTool, Tool, ToolConfig

if TYPE_CHECKING:
    from argparse import ArgumentParser


class GenerateTool(NameOrAllTool):
    """Generate the client code for one or all databases."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(name="generate", help_text="Generate database clients")

    def run_one(self, name: str, **kwargs: Any) -> None:
        self.service.orchestrator.generate_client(name)

    def run_all(self, **kwargs: Any) -> BulkResult:
        return self.service.orchestrator.generate_all_clients()


class SeedTool(NameOrAllTool):
    """Run the seed script for one or all databases."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(name="seed", help_text="Seed databases")

    def run_one(self, name: str, **kwargs: Any) -> None:
        self.service.orchestrator.run_seed(name)

    def run_all(self, **kwargs: Any) -> BulkResult:
        return self.service.orchestrator.run_all_seeds()


class SetupTool(NameOrAllTool):
    """Apply migrations, then generate the client."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(
            name="setup",
            help_text="Migrate and generate",
            description="Apply migrations, then generate the client, per database.",
        )

    def run_one(self, name: str, **kwargs: Any) -> None:
        self.service.setup(name)

    def run_all(self, **kwargs: Any) -> BulkResult:
        return self.service.setup_all()


class _SingleDatabaseTool(Tool):
    def add_args(self, parser: ArgumentParser) -> None:
        parser.add_argument("name", help="database name")


class PushTool(_SingleDatabaseTool):
    """Push the schema without creating a migration."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(name="push", help_text="Push schema to a database")

    def run(self, **kwargs: Any) -> int:
        name = kwargs["name"]
        self.service.orchestrator.push_schema(name)
        self.out.write(f"{name}: push ok")
        return 0


class StudioTool(_SingleDatabaseTool):
    """Open the data browser for one database."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(name="studio", help_text="Open the data browser")

    def run(self, **kwargs: Any) -> int:
        self.service.orchestrator.open_studio(kwargs["name"])
        return 0
