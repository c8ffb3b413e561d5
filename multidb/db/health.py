"""
Concurrent liveness checks over every known database.
"""

from __future__ import annotations

import math
import queue
import threading
import time
from typing import Any

from ..log import LoggerFactory
from .registry import DEFAULT_MAX_WORKERS, ClientRegistry

DEFAULT_TIMEOUT = 5.0


class HealthChecker:
    """
    Probes databases through their registry handles.

    A database is healthy when its handle can be obtained and ``probe()``
    returns. Every exception, and every probe still running when the time
    budget runs out, counts as unhealthy.
    """

    def __init__(
        self,
        lg: Any,
        registry: ClientRegistry,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        if lg is None:
            raise ValueError("Logger cannot be None")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._lg = LoggerFactory.derive(lg, ["db", "health"])
        self._registry = registry
        self.timeout = timeout
        self.max_workers = max_workers

    def _probe(self, name: str) -> bool:
        try:
            self._registry.get_client(name).probe()
        except Exception as e:
            self._lg.warning("unhealthy", extra={"db": name, "exception": e})
            return False
        self._lg.debug("healthy", extra={"db": name})
        return True

    def check_one(self, name: str) -> bool:
        """Probe a single database, bounded by the per-database timeout."""
        return self.check_names([name])[name]

    def check(self) -> dict[str, bool]:
        """Probe every name the registry knows (manual and discovered)."""
        return self.check_names(self._registry.get_all_names())

    def check_names(self, names: list[str]) -> dict[str, bool]:
        """
        Probe ``names`` concurrently.

        The overall budget is ``timeout`` per batch of ``max_workers`` probes.
        Probes run on daemon threads, so a database that never answers
        cannot hold the process open once the budget is spent.

        Returns:
            Mapping of every name to its health, in the order given
        """
        results = {name: False for name in names}
        if not names:
            return results

        workers = min(self.max_workers, len(names))
        budget = self.timeout * math.ceil(len(names) / workers)
        deadline = time.monotonic() + budget

        todo: queue.SimpleQueue[str] = queue.SimpleQueue()
        for name in results:
            todo.put(name)
        finished: dict[str, bool] = {}
        done = threading.Condition()

        def worker() -> None:
            while time.monotonic() < deadline:
                try:
                    name = todo.get_nowait()
                except queue.Empty:
                    return
                healthy = self._probe(name)
                with done:
                    finished[name] = healthy
                    done.notify_all()

        for i in range(workers):
            threading.Thread(
                target=worker, name=f"multidb-health-{i}", daemon=True
            ).start()

        with done:
            done.wait_for(
                lambda: len(finished) == len(results),
                timeout=max(0.0, deadline - time.monotonic()),
            )
            results.update(finished)
            pending = [name for name in results if name not in finished]

        for name in pending:
            self._lg.warning(
                "health check timed out", extra={"db": name, "after": budget}
            )

        healthy = sum(results.values())
        self._lg.info(
            "health checked", extra={"healthy": healthy, "total": len(results)}
        )
        return results
