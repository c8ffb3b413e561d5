"""Migration lifecycle commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...db.models import ResetOutcome
from ..tool import Tool, ToolConfig

if TYPE_CHECKING:
    from argparse import ArgumentParser


class MigrateTool(Tool):
    """
    ``migrate create|run|status|reset``.

    Examples:
        multidb migrate create orders add_index
        multidb migrate run orders --label add_index
        multidb migrate run --all
        multidb migrate reset orders --force
    """

    def _create_config(self) -> ToolConfig:
        return ToolConfig(
            name="migrate",
            help_text="Create, apply, inspect or reset migrations",
        )

    def add_args(self, parser: ArgumentParser) -> None:
        sub = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

        create = sub.add_parser("create", help="create an empty migration file")
        create.add_argument("name", help="database name")
        create.add_argument("label", help="migration label")

        run = sub.add_parser("run", help="apply migrations")
        group = run.add_mutually_exclusive_group()
        group.add_argument("name", nargs="?", help="database name")
        group.add_argument(
            "--all", dest="all_dbs", action="store_true", help="all databases"
        )
        run.add_argument("--label", help="name for the new migration")

        status = sub.add_parser("status", help="show migration status")
        status.add_argument("name", help="database name")

        reset = sub.add_parser("reset", help="drop and re-apply all migrations")
        reset.add_argument("name", help="database name")
        reset.add_argument(
            "--force", action="store_true", help="skip the confirmation prompt"
        )

    def run(self, **kwargs: Any) -> int:
        action = kwargs["action"]
        handler = getattr(self, f"_{action}")
        return handler(**kwargs)

    def _create(self, name: str, label: str, **kwargs: Any) -> int:
        path = self.service.orchestrator.create_migration(name, label)
        self.out.write(str(path))
        return 0

    def _run(self, name: str | None = None, label: str | None = None, **kwargs: Any) -> int:
        orchestrator = self.service.orchestrator
        if name:
            orchestrator.run_migrations(name, label)
            self.out.write(f"{name}: migrate ok")
            return 0
        return self.report(orchestrator.run_all_migrations(label))

    def _status(self, name: str, **kwargs: Any) -> int:
        self.service.orchestrator.get_status(name)
        return 0

    def _reset(self, name: str, force: bool = False, **kwargs: Any) -> int:
        outcome = self.service.orchestrator.reset_database(
            name, force=force, confirm=self.ctx.confirm
        )
        if outcome is ResetOutcome.CANCELLED:
            self.out.write("cancelled")
        else:
            self.out.write(f"{name}: reset ok")
        return 0
