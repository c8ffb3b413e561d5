"""CLI subcommands."""

from .env_tool import EnvTool
from .health_tool import HealthTool
from .list_tool import ListTool
from .migrate_tool import MigrateTool
from .operation_tools import GenerateTool, PushTool, SeedTool, SetupTool, StudioTool
from .scan_tool import ScanTool

__all__ = [
    "EnvTool",
    "GenerateTool",
    "HealthTool",
    "ListTool",
    "MigrateTool",
    "PushTool",
    "ScanTool",
    "SeedTool",
    "SetupTool",
    "StudioTool",
]
