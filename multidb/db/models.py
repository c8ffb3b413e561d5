"""
Data model shared by the registry, discovery and migration components.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote


class Provider(str, enum.Enum):
    """Database engine families with built-in defaults."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"
    MONGODB = "mongodb"
    COCKROACHDB = "cockroachdb"

    @classmethod
    def values(cls) -> list[str]:
        return [p.value for p in cls]


DEFAULT_PROVIDER = Provider.POSTGRESQL.value

_DEFAULT_PORTS = {
    "postgresql": 5432,
    "cockroachdb": 26257,
    "mysql": 3306,
    "sqlserver": 1433,
    "mongodb": 27017,
}


@dataclass(frozen=True)
class ConnectionParams:
    """Structured connection settings, rendered into a provider URL on demand."""

    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None
    database: str | None = None
    ssl: bool = False

    def to_url(self, provider: str) -> str:
        """
        Render a provider-style connection URL.

        SQLite only uses ``database`` (a file path). SQL Server uses the
        semicolon-separated ``sqlserver://host:port;database=...`` form.
        """
        if provider == Provider.SQLITE.value:
            return f"file:{self.database or './dev.db'}"

        host = self.host or "localhost"
        port = self.port or _DEFAULT_PORTS.get(provider)
        hostport = f"{host}:{port}" if port else host

        if provider == Provider.SQLSERVER.value:
            parts = [f"sqlserver://{hostport}"]
            if self.database:
                parts.append(f"database={self.database}")
            if self.username:
                parts.append(f"user={self.username}")
            if self.password:
                parts.append(f"password={self.password}")
            if self.ssl:
                parts.append("encrypt=true")
            return ";".join(parts)

        scheme = "postgresql" if provider == Provider.COCKROACHDB.value else provider
        auth = ""
        if self.username:
            auth = quote(self.username, safe="")
            if self.password:
                auth += ":" + quote(self.password, safe="")
            auth += "@"
        url = f"{scheme}://{auth}{hostport}/{self.database or ''}"
        if self.ssl:
            url += "?ssl=true" if provider == Provider.MYSQL.value else "?sslmode=require"
        return url


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Identity and connection intent for one logical database.

    Either ``url`` or ``connection`` may be given; with neither, the URL is
    resolved from the environment when a handle is first created.
    """

    name: str
    provider: str = DEFAULT_PROVIDER
    url: str | None = None
    connection: ConnectionParams | None = None
    logging: tuple[str, ...] = ("error",)
    create_db: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Database name cannot be empty")

    @property
    def explicit_url(self) -> str | None:
        """URL given directly or through connection params, if any."""
        if self.url:
            return self.url
        if self.connection is not None:
            return self.connection.to_url(self.provider)
        return None


@runtime_checkable
class ClientHandle(Protocol):
    """A live client for one logical database."""

    def connect(self) -> None: ...

    def probe(self) -> None: ...

    def disconnect(self) -> None: ...


class ClientFactory(Protocol):
    """Builds a (not yet connected) client handle."""

    def __call__(self, config: DatabaseConfig, url: str) -> ClientHandle: ...


@dataclass(frozen=True)
class DiscoveredClient:
    """Result of analysing one candidate directory under the clients root."""

    name: str
    path: Path
    schema_path: Path | None = None
    provider: str | None = None
    is_valid: bool = False
    error: str | None = None
    factory: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class MigrationJobConfig:
    """Per-database migration metadata."""

    name: str
    schema_path: Path
    migrations_dir: Path


class ResetOutcome(str, enum.Enum):
    """Result of a reset request."""

    RESET = "reset"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one per-database step of a bulk operation."""

    name: str
    ok: bool
    error: str | None = None


@dataclass
class BulkResult:
    """Ordered per-database outcomes of a bulk operation."""

    operation: str
    results: list[OperationResult] = field(default_factory=list)

    def add(self, result: OperationResult) -> None:
        self.results.append(result)

    def __iter__(self) -> Iterator[OperationResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> list[str]:
        return [r.name for r in self.results if r.ok]

    @property
    def failed(self) -> list[str]:
        return [r.name for r in self.results if not r.ok]

    @property
    def any_failed(self) -> bool:
        return any(not r.ok for r in self.results)

    @property
    def all_failed(self) -> bool:
        return bool(self.results) and all(not r.ok for r in self.results)
