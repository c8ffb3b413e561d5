"""
Pytest configuration and shared fixtures.

Registers the custom markers and the shared fixture plugins for the multidb
test suite.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from multidb.config import Config

# =============================================================================
# Plugin Registration
# =============================================================================

pytest_plugins = [
    "tests.fixtures.logging",
    "tests.fixtures.clients",
]


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real SQLite files, subprocesses)"
    )
    config.addinivalue_line("markers", "e2e: End-to-end CLI workflows")
    config.addinivalue_line("markers", "property: Hypothesis property tests")


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project layout with an ``etc`` directory and empty database roots."""
    (tmp_path / "etc").mkdir()
    for sub in ("clients", "schemas", "migrations"):
        (tmp_path / "db" / sub).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def clean_env() -> dict[str, str]:
    """Empty environment mapping, so the real process environment never leaks in."""
    return {}


@pytest.fixture
def write_config(project_dir: Path) -> Generator:
    """Write ``etc/multidb.yaml`` and return a loaded Config."""

    def write(text: str, env: dict[str, str] | None = None) -> Config:
        path = project_dir / "etc" / "multidb.yaml"
        path.write_text(text)
        return Config(path, env=env or {})

    yield write


# =============================================================================
# Test Collection Hooks
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Add the 'unit' marker to tests without another category marker."""
    for item in items:
        if not any(
            mark.name in ["integration", "e2e"] for mark in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)
