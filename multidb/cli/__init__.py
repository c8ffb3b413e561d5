"""
Command-line interface for multidb.
"""

from .cli import main
from .output import BufferedOutput, ConsoleOutput, OutputWriter
from .tool import Tool, ToolConfig, ToolContext

__all__ = [
    "main",
    "Tool",
    "ToolConfig",
    "ToolContext",
    "OutputWriter",
    "ConsoleOutput",
    "BufferedOutput",
]
