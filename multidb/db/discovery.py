"""
Discovery of client packages under the clients root.

Layout expected for each candidate directory::

    <clients_root>/<name>/client.py       entry module, exports a callable ``Client``
    <clients_root>/<name>/schema.prisma   optional, colocated schema

When no colocated schema exists, the schemas root is searched for a
``*.prisma`` file whose stem matches the client name.
"""

from __future__ import annotations

import hashlib
import importlib.util
import re
import sys
import threading
from pathlib import Path
from typing import Any, Protocol

from ..log import LoggerFactory
from .models import DiscoveredClient

ENTRY_MODULE = "client.py"
COLOCATED_SCHEMA = "schema.prisma"
SCHEMA_SUFFIX = ".prisma"
FACTORY_SYMBOL = "Client"
DEFAULT_LOAD_TIMEOUT = 10.0

_DATASOURCE_PATTERN = re.compile(r"datasource\s+\w+\s*\{([^}]*)\}", re.DOTALL)
_PROVIDER_PATTERN = re.compile(r'provider\s*=\s*"([^"]+)"')


def extract_provider(text: str) -> str | None:
    """
    Extract the provider of the first datasource block of a schema.

    Example:
        >>> extract_provider('datasource db {\\n  provider = "mysql"\\n}')
        'mysql'
    """
    block = _DATASOURCE_PATTERN.search(text)
    if block is None:
        return None
    match = _PROVIDER_PATTERN.search(block.group(1))
    return match.group(1) if match else None


class FactoryLoader(Protocol):
    """Loads the client factory exported by an entry module."""

    def load(self, name: str, entry: Path) -> Any: ...


class ModuleFactoryLoader:
    """Imports the entry module from its file path and returns its ``Client``."""

    MODULE_PREFIX = "multidb_clients"

    @classmethod
    def module_name(cls, name: str, entry: Path) -> str:
        """Unique module name per entry file, e.g. ``multidb_clients.a_b_1f3c09e2``."""
        digest = hashlib.sha1(str(entry.resolve()).encode()).hexdigest()[:8]
        stem = re.sub(r"\W", "_", name)
        return f"{cls.MODULE_PREFIX}.{stem}_{digest}"

    def load(self, name: str, entry: Path) -> Any:
        """
        Raises:
            ImportError: If the module cannot be imported or lacks a callable Client
        """
        module_name = self.module_name(name, entry)
        spec = importlib.util.spec_from_file_location(
            module_name, entry, submodule_search_locations=[str(entry.parent)]
        )
        if spec is None or spec.loader is None:
            raise ImportError(f"cannot load {entry}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise

        factory = getattr(module, FACTORY_SYMBOL, None)
        if factory is None:
            raise ImportError(f"{FACTORY_SYMBOL} not exported")
        if not callable(factory):
            raise ImportError(f"{FACTORY_SYMBOL} is not callable")
        return factory


class ClientDiscovery:
    """
    Scans the clients root and classifies each candidate as valid or broken.

    Scanning never raises for an individual candidate: any failure is recorded
    on the DiscoveredClient with ``is_valid=False``.
    """

    def __init__(
        self,
        lg: Any,
        clients_root: str | Path,
        schemas_root: str | Path,
        loader: FactoryLoader | None = None,
        timeout: float | None = DEFAULT_LOAD_TIMEOUT,
    ) -> None:
        if lg is None:
            raise ValueError("Logger cannot be None")
        self._lg = LoggerFactory.derive(lg, ["db", "discovery"])
        self.clients_root = Path(clients_root)
        self.schemas_root = Path(schemas_root)
        self._loader = loader if loader is not None else ModuleFactoryLoader()
        self._timeout = timeout

    def scan(self) -> dict[str, DiscoveredClient]:
        """
        Scan the clients root.

        Returns:
            Fresh mapping of directory name to DiscoveredClient, in sorted order.
            Empty (with a warning) when the clients root does not exist.
        """
        if not self.clients_root.is_dir():
            self._lg.warning(
                "clients root not found", extra={"path": str(self.clients_root)}
            )
            return {}

        found: dict[str, DiscoveredClient] = {}
        for entry in sorted(self.clients_root.iterdir()):
            if not entry.is_dir() or entry.name.startswith((".", "__")):
                continue
            client = self.analyze(entry)
            found[client.name] = client

        valid = sum(1 for c in found.values() if c.is_valid)
        self._lg.info(
            "scanned clients",
            extra={"found": len(found), "valid": valid, "path": str(self.clients_root)},
        )
        return found

    def analyze(self, path: Path) -> DiscoveredClient:
        """Analyse one candidate directory."""
        name = path.name
        entry = path / ENTRY_MODULE
        if not entry.is_file():
            self._lg.debug("no entry module", extra={"client": name})
            return DiscoveredClient(name=name, path=path, error="entry module not found")

        schema_path = self.find_schema(name, path)
        provider = None
        if schema_path is not None:
            try:
                provider = extract_provider(schema_path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as e:
                self._lg.warning(
                    "failed to read schema",
                    extra={"client": name, "schema": str(schema_path), "exception": e},
                )

        try:
            factory = self._load(name, entry)
        except Exception as e:
            self._lg.warning(
                "failed to load client", extra={"client": name, "exception": e}
            )
            return DiscoveredClient(
                name=name,
                path=path,
                schema_path=schema_path,
                provider=provider,
                error=f"failed to load module: {e}",
            )

        self._lg.debug(
            "found client",
            extra={"client": name, "provider": provider, "schema": schema_path},
        )
        return DiscoveredClient(
            name=name,
            path=path,
            schema_path=schema_path,
            provider=provider,
            is_valid=True,
            factory=factory,
        )

    def find_schema(self, name: str, client_dir: Path | None = None) -> Path | None:
        """
        Locate the schema for a client.

        A colocated schema wins. Otherwise an exact stem match under the schemas
        root wins, then the first stem (sorted) that contains or is contained
        in ``name``.
        """
        if client_dir is not None:
            colocated = client_dir / COLOCATED_SCHEMA
            if colocated.is_file():
                return colocated

        if not self.schemas_root.is_dir():
            return None

        schemas = sorted(
            p for p in self.schemas_root.iterdir()
            if p.is_file() and p.suffix == SCHEMA_SUFFIX
        )
        for schema in schemas:
            if schema.stem == name:
                return schema

        matches = [s for s in schemas if s.stem in name or name in s.stem]
        if not matches:
            return None
        if len(matches) > 1:
            self._lg.warning(
                "ambiguous schema match",
                extra={
                    "client": name,
                    "candidates": ",".join(m.name for m in matches),
                    "chosen": matches[0].name,
                },
            )
        return matches[0]

    def _load(self, name: str, entry: Path) -> Any:
        """Run the loader on a daemon thread, bounded by the load timeout."""
        if self._timeout is None:
            return self._loader.load(name, entry)

        outcome: dict[str, Any] = {}

        def target() -> None:
            try:
                outcome["factory"] = self._loader.load(name, entry)
            except BaseException as e:
                outcome["error"] = e

        thread = threading.Thread(
            target=target, name=f"multidb-load-{name}", daemon=True
        )
        thread.start()
        thread.join(self._timeout)
        if thread.is_alive():
            raise TimeoutError(f"loading timed out after {self._timeout}s")
        if "error" in outcome:
            error = outcome["error"]
            if not isinstance(error, Exception):
                raise ImportError(f"module aborted: {error!r}") from error
            raise error
        return outcome["factory"]
