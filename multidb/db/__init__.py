"""
Management of multiple logical databases.

Discovery of client packages, connection URL resolution, a registry of live
client handles, migration orchestration and health checks.
"""

from .client import SQLAlchemyClient, SQLAlchemyClientFactory
from .discovery import ClientDiscovery, ModuleFactoryLoader, extract_provider
from .health import HealthChecker
from .migration import MigrationOrchestrator
from .models import (
    BulkResult,
    ClientFactory,
    ClientHandle,
    ConnectionParams,
    DatabaseConfig,
    DiscoveredClient,
    MigrationJobConfig,
    OperationResult,
    Provider,
    ResetOutcome,
)
from .registry import ClientRegistry
from .resolver import ConfigResolver
from .service import DatabaseService
from .tool import MigrationTool

__all__ = [
    "BulkResult",
    "ClientDiscovery",
    "ClientFactory",
    "ClientHandle",
    "ClientRegistry",
    "ConfigResolver",
    "ConnectionParams",
    "DatabaseConfig",
    "DatabaseService",
    "DiscoveredClient",
    "HealthChecker",
    "MigrationJobConfig",
    "MigrationOrchestrator",
    "MigrationTool",
    "ModuleFactoryLoader",
    "OperationResult",
    "Provider",
    "ResetOutcome",
    "SQLAlchemyClient",
    "SQLAlchemyClientFactory",
    "extract_provider",
]
