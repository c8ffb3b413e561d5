"""
In-memory client handles for registry and health tests.
"""

import threading
import time
from typing import Any

from multidb.db.models import DatabaseConfig


class FakeHandle:
    """ClientHandle recording calls, with configurable failures."""

    def __init__(
        self,
        config: DatabaseConfig,
        url: str,
        fail_connect: bool = False,
        fail_probe: bool = False,
        fail_disconnect: bool = False,
        probe_delay: float = 0.0,
    ) -> None:
        self.config = config
        self.url = url
        self.fail_connect = fail_connect
        self.fail_probe = fail_probe
        self.fail_disconnect = fail_disconnect
        self.probe_delay = probe_delay
        self.connects = 0
        self.probes = 0
        self.disconnected = False

    def connect(self) -> None:
        self.connects += 1
        if self.fail_connect:
            raise ConnectionError(f"cannot reach {self.config.name}")

    def probe(self) -> None:
        self.probes += 1
        if self.probe_delay:
            time.sleep(self.probe_delay)
        if self.fail_probe:
            raise ConnectionError(f"probe failed for {self.config.name}")

    def disconnect(self) -> None:
        self.disconnected = True
        if self.fail_disconnect:
            raise RuntimeError(f"dispose failed for {self.config.name}")


class FakeFactory:
    """
    ClientFactory creating FakeHandles.

    Per-name behaviour is given as keyword dicts, e.g.
    ``FakeFactory(orders={"fail_probe": True})``.
    """

    def __init__(self, create_delay: float = 0.0, **behaviour: dict[str, Any]) -> None:
        self.create_delay = create_delay
        self.behaviour = behaviour
        self.created: list[FakeHandle] = []
        self._lock = threading.Lock()

    def __call__(self, config: DatabaseConfig, url: str) -> FakeHandle:
        if self.create_delay:
            time.sleep(self.create_delay)
        handle = FakeHandle(config, url, **self.behaviour.get(config.name, {}))
        with self._lock:
            self.created.append(handle)
        return handle

    def created_for(self, name: str) -> list[FakeHandle]:
        return [h for h in self.created if h.config.name == name]
