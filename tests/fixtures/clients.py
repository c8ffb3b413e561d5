"""
Fixtures building client package trees on disk.
"""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

POSTGRES_SCHEMA = """
generator client {
  provider = "prisma-client-js"
}

datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}
"""

VALID_CLIENT = """
class Client:
    def __init__(self, config, url):
        self.config = config
        self.url = url

    def connect(self):
        pass

    def probe(self):
        pass

    def disconnect(self):
        pass
"""

MakeClient = Callable[..., Path]


def schema_for(provider: str) -> str:
    return POSTGRES_SCHEMA.replace('"postgresql"', f'"{provider}"')


@pytest.fixture
def clients_root(tmp_path: Path) -> Path:
    root = tmp_path / "db" / "clients"
    root.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def schemas_root(tmp_path: Path) -> Path:
    root = tmp_path / "db" / "schemas"
    root.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def make_client(clients_root: Path) -> MakeClient:
    """
    Create ``<clients_root>/<name>``.

    Args of the returned callable:
        name: Directory name
        code: Source of client.py (None for no entry module)
        schema: Content of a colocated schema.prisma (None for none)
    """

    def make(name: str, code: str | None = VALID_CLIENT, schema: str | None = None) -> Path:
        path = clients_root / name
        path.mkdir()
        if code is not None:
            (path / "client.py").write_text(textwrap.dedent(code))
        if schema is not None:
            (path / "schema.prisma").write_text(schema)
        return path

    return make
