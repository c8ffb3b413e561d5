"""
Migration orchestration across logical databases.

Each registered database maps to a schema path and a migrations directory;
lifecycle operations are delegated to the external migration tool.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from ..exceptions import DatabaseNotFoundError, MigrationError
from ..log import LoggerFactory
from .discovery import SCHEMA_SUFFIX
from .models import (
    BulkResult,
    DatabaseConfig,
    DiscoveredClient,
    MigrationJobConfig,
    OperationResult,
    ResetOutcome,
)
from .tool import MigrationTool

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_LABEL_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")

_TEMPLATE = """-- Migration: {migration}
-- Database: {name}
-- Created: {created}

-- Add your SQL migration here
"""

ConfirmFn = Callable[[str], bool]


class MigrationOrchestrator:
    """
    Dispatches migration operations to the tool, keyed by database name.

    Single-database operations propagate MigrationToolError. Bulk operations
    run sequentially in registration order, log failures and carry on, and
    report every outcome in a BulkResult.
    """

    def __init__(
        self,
        lg: Any,
        tool: MigrationTool,
        schemas_root: str | Path,
        migrations_root: str | Path,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        if lg is None:
            raise ValueError("Logger cannot be None")
        self._lg = LoggerFactory.derive(lg, ["db", "migration"])
        self._tool = tool
        self.schemas_root = Path(schemas_root)
        self.migrations_root = Path(migrations_root)
        self._now = now
        self._jobs: dict[str, MigrationJobConfig] = {}

    @property
    def tool(self) -> MigrationTool:
        return self._tool

    # Registration

    def schema_path_for(self, provider: str) -> Path:
        """Schema file for a provider: ``{schemas_root}/{provider}.prisma``."""
        return self.schemas_root / f"{provider}{SCHEMA_SUFFIX}"

    def add_database_migration(self, job: MigrationJobConfig) -> None:
        """Register (or replace) the migration job for ``job.name``."""
        self._jobs[job.name] = job
        self._lg.debug(
            "added migration job",
            extra={"db": job.name, "schema": str(job.schema_path)},
        )

    def add_database_from_config(self, config: DatabaseConfig) -> MigrationJobConfig:
        """Derive and register a job from the database's provider."""
        job = MigrationJobConfig(
            name=config.name,
            schema_path=self.schema_path_for(config.provider),
            migrations_dir=self.migrations_root / config.name,
        )
        self.add_database_migration(job)
        return job

    def add_discovered_client(self, client: DiscoveredClient) -> MigrationJobConfig:
        """Register a job for a discovered client, preferring its own schema."""
        if client.schema_path is not None:
            schema_path = client.schema_path
        else:
            schema_path = self.schema_path_for(client.provider or "postgresql")
        job = MigrationJobConfig(
            name=client.name,
            schema_path=schema_path,
            migrations_dir=self.migrations_root / client.name,
        )
        self.add_database_migration(job)
        return job

    def get_database_names(self) -> list[str]:
        return list(self._jobs)

    def get_job(self, name: str) -> MigrationJobConfig:
        """
        Raises:
            DatabaseNotFoundError: If no job is registered for ``name``
        """
        job = self._jobs.get(name)
        if job is None:
            raise DatabaseNotFoundError(name, available=list(self._jobs))
        return job

    # Single-database operations

    def create_migration(self, name: str, label: str) -> Path:
        """
        Write an empty timestamped migration file.

        Returns:
            Path of ``{migrations_dir}/{YYYYmmddHHMMSS}_{label}.sql``

        Raises:
            DatabaseNotFoundError: If ``name`` is unknown
            MigrationError: If the label is not a plain identifier
            OSError: If the file cannot be written
        """
        job = self.get_job(name)
        if not _LABEL_PATTERN.match(label):
            raise MigrationError("Invalid migration label", db=name, label=label)

        created = self._now()
        migration = f"{created.strftime(TIMESTAMP_FORMAT)}_{label}"
        job.migrations_dir.mkdir(parents=True, exist_ok=True)
        path = job.migrations_dir / f"{migration}.sql"
        path.write_text(
            _TEMPLATE.format(migration=migration, name=name, created=created.isoformat()),
            encoding="utf-8",
        )
        self._lg.info("created migration", extra={"db": name, "file": path.name})
        return path

    def run_migrations(self, name: str, label: str | None = None) -> None:
        args = ["migrate", "dev"]
        if label:
            args += ["--name", label]
        self._invoke(name, args, "applied migrations")

    def get_status(self, name: str) -> None:
        self._invoke(name, ["migrate", "status"], "checked status")

    def reset_database(
        self, name: str, force: bool = False, confirm: ConfirmFn | None = None
    ) -> ResetOutcome:
        """
        Drop and re-apply all migrations.

        Runs only when ``force`` is set or ``confirm(name)`` returns True. A
        missing, declining or failing confirmation cancels the reset.
        """
        job = self.get_job(name)
        if not force:
            approved = False
            if confirm is not None:
                try:
                    approved = bool(confirm(name))
                except Exception as e:
                    self._lg.warning(
                        "confirmation failed", extra={"db": name, "exception": e}
                    )
            if not approved:
                self._lg.info("reset cancelled", extra={"db": name})
                return ResetOutcome.CANCELLED

        self._tool.run(["migrate", "reset", "--force"], job.schema_path)
        self._lg.info("reset database", extra={"db": name})
        return ResetOutcome.RESET

    def push_schema(self, name: str) -> None:
        self._invoke(name, ["db", "push"], "pushed schema")

    def generate_client(self, name: str) -> None:
        self._invoke(name, ["generate"], "generated client")

    def run_seed(self, name: str) -> None:
        self._invoke(name, ["db", "seed"], "seeded")

    def open_studio(self, name: str) -> None:
        """Open the tool's data browser; blocks until it exits."""
        self._invoke(name, ["studio"], "studio closed")

    def _invoke(self, name: str, args: list[str], done: str) -> None:
        job = self.get_job(name)
        self._tool.run(args, job.schema_path)
        self._lg.info(done, extra={"db": name})

    # Bulk operations

    def run_all_migrations(self, label: str | None = None) -> BulkResult:
        return self._run_bulk("migrate", lambda name: self.run_migrations(name, label))

    def generate_all_clients(self) -> BulkResult:
        return self._run_bulk("generate", self.generate_client)

    def run_all_seeds(self) -> BulkResult:
        return self._run_bulk("seed", self.run_seed)

    def _run_bulk(self, operation: str, fn: Callable[[str], Any]) -> BulkResult:
        result = BulkResult(operation)
        for name in self.get_database_names():
            try:
                fn(name)
            except Exception as e:
                self._lg.error(
                    f"{operation} failed", extra={"db": name, "exception": e}
                )
                result.add(OperationResult(name, ok=False, error=str(e)))
            else:
                result.add(OperationResult(name, ok=True))

        self._lg.info(
            f"{operation} finished",
            extra={"ok": len(result.succeeded), "failed": len(result.failed)},
        )
        return result
