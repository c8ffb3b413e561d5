"""
Registry of logical databases and their live client handles.

Holds manually declared DatabaseConfig entries, the latest discovery snapshot,
and lazily created handles (at most one per name).
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ..exceptions import DatabaseNotFoundError, UnsupportedProviderError
from ..log import LoggerFactory
from .client import SQLAlchemyClientFactory
from .discovery import ClientDiscovery
from .models import (
    DEFAULT_PROVIDER,
    ClientFactory,
    ClientHandle,
    DatabaseConfig,
    DiscoveredClient,
)
from .resolver import ConfigResolver
from .urls import mask_url

DEFAULT_MAX_WORKERS = 8


class ClientRegistry:
    """
    Named database registry with memoized client handles.

    Factory selection for a name, first match wins:
        1. the ``Client`` factory of a valid discovered client with that name
        2. the factory registered for the config's provider
        3. the built-in SQLAlchemy client

    Example:
        >>> registry = ClientRegistry(lg, ConfigResolver(lg))
        >>> registry.add_database(DatabaseConfig(name="cache", provider="sqlite"))
        >>> with registry:
        ...     registry.get_client("cache").probe()
    """

    def __init__(
        self,
        lg: Any,
        resolver: ConfigResolver,
        discovery: ClientDiscovery | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        default_factory: ClientFactory | None = None,
    ) -> None:
        """
        Args:
            lg: Logger instance
            resolver: Resolver used when a config carries no explicit URL
            discovery: Discovery used by scan() and auto_register_clients()
            max_workers: Concurrency cap for disconnect_all()
            default_factory: Fallback factory (SQLAlchemy client by default)
        """
        if lg is None:
            raise ValueError("Logger cannot be None")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self._lg = LoggerFactory.derive(lg, ["db", "registry"])
        self._resolver = resolver
        self._discovery = discovery
        self._max_workers = max_workers
        self._default_factory = (
            default_factory if default_factory is not None else SQLAlchemyClientFactory(lg)
        )

        self._lock = threading.Lock()
        self._name_locks: dict[str, threading.Lock] = {}
        self._configs: dict[str, DatabaseConfig] = {}
        self._discovered: dict[str, DiscoveredClient] = {}
        self._handles: dict[str, ClientHandle] = {}
        self._factories: dict[str, ClientFactory] = {}

    @property
    def resolver(self) -> ConfigResolver:
        return self._resolver

    @property
    def discovery(self) -> ClientDiscovery | None:
        return self._discovery

    @property
    def discovered(self) -> dict[str, DiscoveredClient]:
        """Latest discovery snapshot (a copy)."""
        with self._lock:
            return dict(self._discovered)

    def register_factory(self, provider: str, factory: ClientFactory) -> None:
        """Use ``factory`` for every database of ``provider`` without a discovered client."""
        with self._lock:
            self._factories[provider] = factory
        self._lg.debug("registered factory", extra={"provider": provider})

    def add_database(self, config: DatabaseConfig) -> None:
        """Add or replace the configuration registered under ``config.name``."""
        with self._lock:
            replaced = config.name in self._configs
            self._configs[config.name] = config
        self._lg.debug(
            "replaced database" if replaced else "added database",
            extra={"db": config.name, "provider": config.provider},
        )

    def remove_database(self, name: str) -> bool:
        """Remove a manual registration and dispose of its handle, if any."""
        with self._lock:
            removed = self._configs.pop(name, None) is not None
        self.disconnect(name)
        return removed

    def get_config(self, name: str) -> DatabaseConfig:
        """
        Get the configuration for ``name``.

        Valid discovered clients without a manual registration get a config
        built from their inferred provider.

        Raises:
            DatabaseNotFoundError: If the name is neither registered nor discovered
        """
        with self._lock:
            config = self._configs.get(name)
            discovered = self._discovered.get(name)
        if config is not None:
            return config
        if discovered is not None and discovered.is_valid:
            return DatabaseConfig(
                name=name, provider=discovered.provider or DEFAULT_PROVIDER
            )
        raise DatabaseNotFoundError(name, available=self.get_all_names())

    def get_client(self, name: str) -> ClientHandle:
        """
        Get the live handle for ``name``, creating and connecting it on first use.

        Concurrent first calls for the same name construct exactly one handle.

        Raises:
            DatabaseNotFoundError: If the name is unknown
            UnsupportedProviderError: If no URL can be resolved
            Exception: Whatever the handle's connect() raises (nothing is cached)
        """
        with self._lock:
            handle = self._handles.get(name)
            if handle is not None:
                return handle
            name_lock = self._name_locks.setdefault(name, threading.Lock())

        with name_lock:
            with self._lock:
                handle = self._handles.get(name)
            if handle is not None:
                return handle

            config = self.get_config(name)
            factory = self._select_factory(config)
            url = config.explicit_url or self._resolver.resolve(name, config.provider)

            handle = factory(config, url)
            handle.connect()
            with self._lock:
                self._handles[name] = handle

        self._lg.info("connected", extra={"db": name, "url": mask_url(url)})
        return handle

    def _select_factory(self, config: DatabaseConfig) -> ClientFactory:
        with self._lock:
            discovered = self._discovered.get(config.name)
            provider_factory = self._factories.get(config.provider)
        if discovered is not None and discovered.is_valid and discovered.factory:
            return discovered.factory
        if provider_factory is not None:
            return provider_factory
        return self._default_factory

    def is_connected(self, name: str) -> bool:
        with self._lock:
            return name in self._handles

    def get_database_names(self) -> list[str]:
        """Manually registered names in insertion order."""
        with self._lock:
            return list(self._configs)

    def get_all_names(self) -> list[str]:
        """Manual names, then valid discovered names not already registered."""
        with self._lock:
            names = list(self._configs)
            names.extend(
                name
                for name, client in self._discovered.items()
                if client.is_valid and name not in self._configs
            )
        return names

    def scan(self) -> dict[str, DiscoveredClient]:
        """Run discovery and replace the stored snapshot."""
        if self._discovery is None:
            self._lg.debug("no discovery configured")
            return {}
        snapshot = self._discovery.scan()
        with self._lock:
            self._discovered = dict(snapshot)
        return snapshot

    def auto_register_clients(self, replace: bool = True) -> list[str]:
        """
        Scan and register every valid discovered client.

        Invalid clients, and clients whose provider has no URL, are logged and
        skipped. With ``replace=False`` names already registered keep their
        existing configuration.

        Returns:
            Names registered, in scan order
        """
        registered = []
        existing = set(self.get_database_names())
        for name, client in self.scan().items():
            if not client.is_valid:
                self._lg.warning(
                    "skipping invalid client", extra={"client": name, "error": client.error}
                )
                continue
            if not replace and name in existing:
                continue

            provider = client.provider or DEFAULT_PROVIDER
            try:
                url = self._resolver.resolve(name, provider)
            except UnsupportedProviderError as e:
                self._lg.error(
                    "skipping client", extra={"client": name, "exception": e}
                )
                continue

            self.add_database(DatabaseConfig(name=name, provider=provider, url=url))
            registered.append(name)

        self._lg.info("auto-registered clients", extra={"count": len(registered)})
        return registered

    def disconnect(self, name: str) -> bool:
        """
        Dispose of the handle for ``name``.

        Returns:
            True if a handle was disconnected without error
        """
        with self._lock:
            handle = self._handles.pop(name, None)
        if handle is None:
            return False
        return self._dispose(name, handle)

    def disconnect_all(self) -> None:
        """Dispose of every handle concurrently. Failures are logged, never raised."""
        with self._lock:
            handles = list(self._handles.items())
            self._handles.clear()
        if not handles:
            return

        workers = min(self._max_workers, len(handles))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="multidb-disconnect"
        ) as pool:
            results = list(pool.map(lambda item: self._dispose(*item), handles))

        self._lg.info(
            "disconnected all",
            extra={"count": len(handles), "failed": results.count(False)},
        )

    def _dispose(self, name: str, handle: ClientHandle) -> bool:
        try:
            handle.disconnect()
        except Exception as e:
            self._lg.error("failed to disconnect", extra={"db": name, "exception": e})
            return False
        self._lg.debug("disconnected", extra={"db": name})
        return True

    def __enter__(self) -> ClientRegistry:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect_all()
