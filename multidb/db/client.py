"""
Built-in client handle backed by a SQLAlchemy engine.

Used for every logical database that does not ship its own client package
under the clients root and has no factory registered for its provider.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

import sqlalchemy
import sqlalchemy.orm
import sqlalchemy_utils

from ..log import LoggerFactory
from .models import DatabaseConfig
from .urls import mask_url, to_sqlalchemy_url

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def _get_engine_kwargs(config: DatabaseConfig, sa_url: str) -> dict[str, Any]:
    """Get engine creation kwargs from config."""
    kwargs: dict[str, Any] = {}

    if sa_url.startswith("sqlite"):
        # Handles are shared between threads (health checks, CLI workers)
        kwargs["connect_args"] = {"check_same_thread": False}

    if "query" in config.logging:
        kwargs["echo"] = True

    return kwargs


class SQLAlchemyClient:
    """
    Client handle wrapping a SQLAlchemy engine and session factory.

    The engine is created lazily by connect(), so constructing a handle never
    touches the network.

    Example:
        >>> config = DatabaseConfig(name="cache", provider="sqlite")
        >>> client = SQLAlchemyClient(lg, config, "file:./cache.db")
        >>> client.connect()
        >>> client.probe()
        >>> with client.session() as session:
        ...     session.execute(sqlalchemy.text("SELECT 1"))
        >>> client.disconnect()
    """

    PROBE_QUERY = "SELECT 1"

    def __init__(self, lg: Any, config: DatabaseConfig, url: str) -> None:
        """
        Initialize the client.

        Args:
            lg: Logger instance
            config: Database configuration
            url: Provider connection URL (translated for SQLAlchemy here)

        Raises:
            UnsupportedProviderError: If the URL has no SQLAlchemy dialect
        """
        if lg is None:
            raise ValueError("Logger cannot be None")

        self._config = config
        self._url = url
        self._sa_url = to_sqlalchemy_url(url)
        self._lg = LoggerFactory.derive(lg, ["db", "client"])
        self._lock = threading.Lock()
        self._engine: Engine | None = None
        self._SessionCls: Any = None

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def url(self) -> str:
        return self._url

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine, creating it if needed."""
        with self._lock:
            if self._engine is None:
                kwargs = _get_engine_kwargs(self._config, self._sa_url)
                self._engine = sqlalchemy.create_engine(self._sa_url, **kwargs)
                self._SessionCls = sqlalchemy.orm.sessionmaker(bind=self._engine)
            return self._engine

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> None:
        """
        Create the engine and open one connection to validate it.

        Creates the database first when ``create_db`` is set and it is missing.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If connection fails
        """
        engine = self.engine
        if self._config.create_db and not sqlalchemy_utils.database_exists(engine.url):
            sqlalchemy_utils.create_database(engine.url)
            self._lg.info("created db", extra={"db": self._config.name})

        with engine.connect():
            pass
        self._lg.debug(
            "connected", extra={"db": self._config.name, "url": mask_url(self._url)}
        )

    def probe(self) -> None:
        """
        Issue a trivial round-trip query.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the query fails
        """
        with self.engine.connect() as conn:
            conn.execute(sqlalchemy.text(self.PROBE_QUERY))

    def session(self) -> Session:
        """Create a new ORM session bound to this database."""
        self.engine
        return self._SessionCls()

    def disconnect(self) -> None:
        """Dispose of the engine and close all pooled connections."""
        with self._lock:
            engine, self._engine = self._engine, None
            self._SessionCls = None
        if engine is not None:
            engine.dispose()
            self._lg.debug("disposed engine", extra={"db": self._config.name})


class SQLAlchemyClientFactory:
    """Client factory producing SQLAlchemyClient handles."""

    def __init__(self, lg: Any) -> None:
        self._lg = lg

    def __call__(self, config: DatabaseConfig, url: str) -> SQLAlchemyClient:
        return SQLAlchemyClient(self._lg, config, url)
