"""
Tests for multidb.db.health (HealthChecker).
"""

import os
import subprocess
import sys
import textwrap
import time
from pathlib import Path

import pytest

from multidb.db.health import HealthChecker
from multidb.db.models import DatabaseConfig
from multidb.db.registry import ClientRegistry
from multidb.db.resolver import ConfigResolver
from tests.helpers.fakes import FakeFactory


def _registry(lg, factory, *names):
    registry = ClientRegistry(lg, ConfigResolver(lg, env={}), default_factory=factory)
    for name in names:
        registry.add_database(DatabaseConfig(name=name))
    return registry


@pytest.mark.unit
class TestHealthChecker:
    def test_invalid_workers(self, lg):
        with pytest.raises(ValueError, match="max_workers"):
            HealthChecker(lg, _registry(lg, FakeFactory()), max_workers=0)

    def test_all_healthy(self, lg):
        factory = FakeFactory()
        checker = HealthChecker(lg, _registry(lg, factory, "a", "b", "c"))

        assert checker.check() == {"a": True, "b": True, "c": True}
        assert all(h.probes == 1 for h in factory.created)

    def test_probe_failure(self, lg):
        factory = FakeFactory(b={"fail_probe": True})
        checker = HealthChecker(lg, _registry(lg, factory, "a", "b"))
        assert checker.check() == {"a": True, "b": False}

    def test_connect_failure(self, lg):
        factory = FakeFactory(a={"fail_connect": True})
        checker = HealthChecker(lg, _registry(lg, factory, "a", "b"))
        assert checker.check() == {"a": False, "b": True}

    def test_unresolvable_url_is_unhealthy(self, lg):
        registry = _registry(lg, FakeFactory())
        registry.add_database(DatabaseConfig(name="legacy", provider="oracle"))
        assert HealthChecker(lg, registry).check() == {"legacy": False}

    def test_slow_probe_times_out(self, lg):
        factory = FakeFactory(slow={"probe_delay": 1.0})
        checker = HealthChecker(lg, _registry(lg, factory, "fast", "slow"), timeout=0.2)

        start = time.monotonic()
        result = checker.check()
        elapsed = time.monotonic() - start

        assert result == {"fast": True, "slow": False}
        assert elapsed < 0.9

    def test_probes_run_concurrently(self, lg):
        names = [f"db{i}" for i in range(4)]
        factory = FakeFactory(**{name: {"probe_delay": 0.3} for name in names})
        checker = HealthChecker(lg, _registry(lg, factory, *names), max_workers=4)

        start = time.monotonic()
        result = checker.check()
        elapsed = time.monotonic() - start

        assert all(result.values())
        assert elapsed < 1.0

    def test_check_one(self, lg):
        factory = FakeFactory(b={"fail_probe": True})
        checker = HealthChecker(lg, _registry(lg, factory, "a", "b"))
        assert checker.check_one("a") is True
        assert checker.check_one("b") is False

    def test_check_one_unknown_is_unhealthy(self, lg):
        checker = HealthChecker(lg, _registry(lg, FakeFactory()))
        assert checker.check_one("missing") is False

    def test_empty(self, lg):
        assert HealthChecker(lg, _registry(lg, FakeFactory())).check() == {}

    def test_result_order(self, lg):
        names = ["zeta", "alpha", "mid"]
        checker = HealthChecker(lg, _registry(lg, FakeFactory(), *names))
        assert list(checker.check()) == names

    def test_reuses_registry_handles(self, lg):
        factory = FakeFactory()
        checker = HealthChecker(lg, _registry(lg, factory, "a"))
        checker.check()
        checker.check()
        assert len(factory.created) == 1
        assert factory.created[0].probes == 2


HANGING_CHECK = textwrap.dedent(
    """
    import io
    import time

    from multidb.db.health import HealthChecker
    from multidb.db.models import DatabaseConfig
    from multidb.db.registry import ClientRegistry
    from multidb.db.resolver import ConfigResolver
    from multidb.log import create_root_lg


    class Hanging:
        def __init__(self, config, url):
            pass

        def connect(self):
            time.sleep(5.0)

        def probe(self):
            pass

        def disconnect(self):
            pass


    lg = create_root_lg("error", colors=False, stream=io.StringIO())
    registry = ClientRegistry(lg, ConfigResolver(lg, env={}), default_factory=Hanging)
    registry.add_database(DatabaseConfig(name="stuck"))
    print(HealthChecker(lg, registry, timeout=0.2).check())
    """
)


@pytest.mark.integration
class TestHealthCheckerProcessExit:
    def test_unanswered_connect_does_not_hold_process(self):
        root = Path(__file__).resolve().parents[2]
        env = {**os.environ, "PYTHONPATH": str(root)}

        start = time.monotonic()
        proc = subprocess.run(
            [sys.executable, "-c", HANGING_CHECK],
            env=env,
            capture_output=True,
            text=True,
            timeout=30,
        )
        elapsed = time.monotonic() - start

        assert proc.returncode == 0, proc.stderr
        assert proc.stdout.strip() == "{'stuck': False}"
        assert elapsed < 3.0
