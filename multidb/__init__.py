"""
multidb - manage several independent databases from one process.
"""

from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING

# db pulls in SQLAlchemy; loaded on first access only
if TYPE_CHECKING:
    from . import db

from .config import Config, find_config_file, get_project_root
from .dot_dict import DotDict
from .exceptions import (
    ConfigError,
    DatabaseNotFoundError,
    DiscoveryError,
    MigrationError,
    MigrationToolError,
    MultiDBError,
    RegistryError,
    UnsupportedProviderError,
)

try:
    __version__ = version("multidb")
except PackageNotFoundError:
    # Package not installed (development mode)
    __version__ = "0.1.0-dev"

__all__ = [
    "__version__",
    "db",
    "Config",
    "DotDict",
    "find_config_file",
    "get_project_root",
    "MultiDBError",
    "ConfigError",
    "UnsupportedProviderError",
    "RegistryError",
    "DatabaseNotFoundError",
    "DiscoveryError",
    "MigrationError",
    "MigrationToolError",
]


def __getattr__(name: str) -> object:
    """Lazy import of the db subpackage."""
    import importlib

    if name == "db":
        module = importlib.import_module(f".{name}", __name__)
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
