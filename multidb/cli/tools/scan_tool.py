"""Client discovery report."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...exceptions import DiscoveryError
from ..output import format_table
from ..tool import Tool, ToolConfig

if TYPE_CHECKING:
    from argparse import ArgumentParser

    from ...db.models import DiscoveredClient


class ScanTool(Tool):
    """Scan the clients root and report every candidate."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(
            name="scan",
            help_text="Discover client packages",
            description=(
                "Scan the clients root and report valid and broken clients, "
                "or the details of a single client."
            ),
        )

    def add_args(self, parser: ArgumentParser) -> None:
        parser.add_argument("name", nargs="?", help="show details of this client only")
        parser.add_argument(
            "--register",
            action="store_true",
            help="register valid clients not already declared",
        )

    def run(self, **kwargs: Any) -> int:
        registry = self.service.registry
        discovery = registry.discovery
        if discovery is None or not discovery.clients_root.is_dir():
            root = discovery.clients_root if discovery is not None else None
            raise DiscoveryError("Clients root not found", path=root)

        if kwargs.get("register"):
            registered = registry.auto_register_clients(replace=False)
            clients = registry.discovered
        else:
            clients = registry.scan()
            registered = None

        name = kwargs.get("name")
        if name:
            if name not in clients:
                raise DiscoveryError(
                    "Client not found", client=name, available=", ".join(clients)
                )
            self._write_details(clients[name])
        else:
            self._write_report(clients)

        if registered is not None:
            self.out.write(f"registered: {', '.join(registered) or '-'}")
        return 0

    def _write_report(self, clients: dict[str, DiscoveredClient]) -> None:
        rows = []
        for client in clients.values():
            if client.is_valid:
                schema = str(client.schema_path) if client.schema_path else "-"
                rows.append((client.name, "valid", client.provider or "-", schema))
            else:
                rows.append((client.name, "invalid", client.error or ""))
        for line in format_table(rows):
            self.out.write(line)

        valid = sum(1 for c in clients.values() if c.is_valid)
        self.out.write(f"{valid}/{len(clients)} clients valid")

    def _write_details(self, client: DiscoveredClient) -> None:
        rows = [
            ("name:", client.name),
            ("status:", "valid" if client.is_valid else "invalid"),
            ("provider:", client.provider or "-"),
            ("path:", str(client.path)),
            ("schema:", str(client.schema_path) if client.schema_path else "-"),
        ]
        if client.error:
            rows.append(("error:", client.error))
        for line in format_table(rows):
            self.out.write(line)
