"""
Wiring of the database components from configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..config import Config, get_project_root
from ..exceptions import ConfigError
from ..log import LoggerFactory
from .discovery import ClientDiscovery
from .health import HealthChecker
from .migration import MigrationOrchestrator
from .models import (
    DEFAULT_PROVIDER,
    BulkResult,
    ConnectionParams,
    DatabaseConfig,
    MigrationJobConfig,
    OperationResult,
)
from .registry import ClientRegistry
from .resolver import ConfigResolver
from .tool import MigrationTool


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _connection_params(name: str, section: Any) -> ConnectionParams:
    if not hasattr(section, "get"):
        raise ConfigError("Database connection must be a mapping", db=name)
    port = section.get("port")
    try:
        port = int(port) if port is not None else None
    except (TypeError, ValueError) as e:
        raise ConfigError("Invalid database port", db=name, port=port) from e
    return ConnectionParams(
        host=section.get("host"),
        port=port,
        username=section.get("username"),
        password=section.get("password"),
        database=section.get("database"),
        ssl=_as_bool(section.get("ssl", False)),
    )


def database_config(name: str, section: Any) -> DatabaseConfig:
    """
    Build a DatabaseConfig from one ``databases.<name>`` entry.

    Raises:
        ConfigError: If the entry is malformed
    """
    if section is None:
        return DatabaseConfig(name=name)
    if not hasattr(section, "get"):
        raise ConfigError("Database entry must be a mapping", db=name)

    categories = section.get("logging", ["error"])
    if isinstance(categories, str):
        categories = [categories]
    connection = section.get("connection")

    return DatabaseConfig(
        name=name,
        provider=str(section.get("provider", DEFAULT_PROVIDER)),
        url=section.get("url") or None,
        connection=_connection_params(name, connection) if connection else None,
        logging=tuple(categories or ()),
        create_db=_as_bool(section.get("create_db", False)),
    )


class DatabaseService:
    """
    Facade over the registry, orchestrator and health checker.

    Example:
        >>> service = DatabaseService.from_config(Config("etc/multidb.yaml"), lg)
        >>> service.bootstrap()
        >>> with service:
        ...     service.health.check()
    """

    def __init__(
        self,
        lg: Any,
        registry: ClientRegistry,
        orchestrator: MigrationOrchestrator,
        health: HealthChecker,
        cfg: Config | None = None,
        auto_register: bool = True,
    ) -> None:
        self._lg = LoggerFactory.derive(lg, ["db", "service"])
        self.registry = registry
        self.orchestrator = orchestrator
        self.health = health
        self._cfg = cfg
        self._auto_register = auto_register

    @classmethod
    def from_config(
        cls,
        cfg: Config,
        lg: Any,
        env: Mapping[str, str] | None = None,
        clients_root: str | Path | None = None,
        schemas_root: str | Path | None = None,
    ) -> DatabaseService:
        """Build every component from a Config. Roots given here override it."""
        clients = Path(clients_root) if clients_root else cfg.resolve_path("paths.clients")
        schemas = Path(schemas_root) if schemas_root else cfg.resolve_path("paths.schemas")
        migrations = cfg.resolve_path("paths.migrations")
        max_workers = int(cfg.get("health.max_workers", 8))

        resolver = ConfigResolver(lg, env=env)
        discovery = ClientDiscovery(
            lg, clients, schemas, timeout=cfg.get("discovery.timeout")
        )
        registry = ClientRegistry(lg, resolver, discovery, max_workers=max_workers)
        tool = MigrationTool(
            lg,
            command=cfg.get("tool.command"),
            timeout=cfg.get("tool.timeout"),
            cwd=get_project_root(cfg.source),
        )
        orchestrator = MigrationOrchestrator(lg, tool, schemas, migrations)
        health = HealthChecker(
            lg,
            registry,
            timeout=float(cfg.get("health.timeout", 5.0)),
            max_workers=max_workers,
        )
        return cls(
            lg,
            registry,
            orchestrator,
            health,
            cfg=cfg,
            auto_register=_as_bool(cfg.get("discovery.auto_register", True)),
        )

    def bootstrap(self) -> None:
        """
        Register the databases declared in config, then discovered clients.

        Declared databases keep their configuration when a client of the same
        name is discovered. A discovered client's own schema replaces the
        provider schema unless the declared entry names a ``schema`` file.
        """
        pinned: set[str] = set()
        databases = self._cfg.get("databases") if self._cfg is not None else None
        for name, section in (databases or {}).items():
            config = database_config(name, section)
            self.registry.add_database(config)

            schema = section.get("schema") if section is not None else None
            if schema:
                pinned.add(name)
                self.orchestrator.add_database_migration(
                    MigrationJobConfig(
                        name=name,
                        schema_path=self.orchestrator.schemas_root / str(schema),
                        migrations_dir=self.orchestrator.migrations_root / name,
                    )
                )
            else:
                self.orchestrator.add_database_from_config(config)

        if self._auto_register:
            self.registry.auto_register_clients(replace=False)
            for client in self.registry.discovered.values():
                if client.is_valid and client.name not in pinned:
                    self.orchestrator.add_discovered_client(client)

        self._lg.info(
            "bootstrapped", extra={"databases": len(self.registry.get_all_names())}
        )

    @property
    def default_name(self) -> str | None:
        names = self.registry.get_all_names()
        return names[0] if names else None

    def all_names(self) -> list[str]:
        return self.registry.get_all_names()

    def setup(self, name: str) -> None:
        """Apply migrations, then generate the client."""
        self.orchestrator.run_migrations(name)
        self.orchestrator.generate_client(name)

    def setup_all(self) -> BulkResult:
        result = BulkResult("setup")
        for name in self.orchestrator.get_database_names():
            try:
                self.setup(name)
            except Exception as e:
                self._lg.error("setup failed", extra={"db": name, "exception": e})
                result.add(OperationResult(name, ok=False, error=str(e)))
            else:
                result.add(OperationResult(name, ok=True))
        return result

    def close(self) -> None:
        self.registry.disconnect_all()

    def __enter__(self) -> DatabaseService:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
