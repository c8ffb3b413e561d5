#!/usr/bin/env python3
"""
multidb CLI - manage several databases from one project.

Usage:
    multidb list
    multidb health [name]
    multidb scan [--register]
    multidb migrate run --all
    multidb --help
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, NoReturn

import multidb

from ..config import Config, find_config_file
from ..exceptions import MultiDBError
from ..log import InvalidLogLevelError, LogConfig, LoggerFactory
from .output import ConsoleOutput, OutputWriter
from .tool import Tool, ToolContext
from .tools import (
    EnvTool,
    GenerateTool,
    HealthTool,
    ListTool,
    MigrateTool,
    PushTool,
    ScanTool,
    SeedTool,
    SetupTool,
    StudioTool,
)

# All CLI tools, in help order
_TOOLS: list[type[Tool]] = [
    ListTool,
    HealthTool,
    ScanTool,
    MigrateTool,
    GenerateTool,
    PushTool,
    StudioTool,
    SeedTool,
    SetupTool,
    EnvTool,
]


class UsageError(Exception):
    """Raised instead of exiting when command-line arguments are invalid."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        raise UsageError(f"{self.prog}: error: {message}")


def _version_string() -> str:
    """Version plus the build commit when the package was built from git."""
    try:
        from .. import _build_info
    except ImportError:
        return f"multidb {multidb.__version__}"
    commit = getattr(_build_info, "COMMIT_SHORT", "")
    if not commit:
        return f"multidb {multidb.__version__}"
    return f"multidb {multidb.__version__} ({commit})"


def build_parser(tools: Sequence[Tool]) -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="multidb",
        description="Manage multiple databases: discovery, migrations and health.",
    )
    parser.add_argument("--config", help="configuration file (default: etc/multidb.yaml)")
    parser.add_argument("--log-level", dest="log_level", help="log level, or 'false'")
    parser.add_argument("--clients-root", dest="clients_root", type=Path)
    parser.add_argument("--schemas-root", dest="schemas_root", type=Path)
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    for tool in tools:
        args, kwargs = tool.cmd
        tool_parser = sub.add_parser(*args, **kwargs)
        tool.add_args(tool_parser)
        tool_parser.set_defaults(_tool=tool)
    return parser


def prompt_confirm(name: str) -> bool:
    """Ask on the terminal before a destructive operation."""
    answer = input(f"Reset database '{name}'? All data will be lost [y/N]: ")
    return answer.strip().lower() in ("y", "yes")


def _load_config(path: str | None, env: Mapping[str, str] | None) -> Config:
    fname = find_config_file(path, env)
    return Config(fname, env=env)


def _log_config(cfg: Config, level: str | None) -> LogConfig:
    section = cfg.get("logging").dict()
    if level is not None:
        section["level"] = level
    return LogConfig.from_config(section)


def main(
    argv: Sequence[str] | None = None,
    out: OutputWriter | None = None,
    env: Mapping[str, str] | None = None,
    confirm: Callable[[str], bool] | None = None,
) -> int:
    """
    Main entry point for the multidb CLI.

    Args:
        argv: Arguments (sys.argv[1:] by default)
        out: Result writer (stdout by default)
        env: Environment (os.environ by default)
        confirm: Reset confirmation; prompts on a terminal when not given

    Returns:
        Process exit code
    """
    tools = [tool_cls() for tool_cls in _TOOLS]
    parser = build_parser(tools)
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        sys.stderr.write(f"{e}\n")
        return 1

    tool: Tool | None = getattr(args, "_tool", None)
    if tool is None:
        parser.print_help(sys.stderr)
        return 1

    try:
        cfg = _load_config(args.config, env)
        lg = LoggerFactory.create_root(_log_config(cfg, args.log_level))
    except (MultiDBError, InvalidLogLevelError) as e:
        sys.stderr.write(f"multidb: {e}\n")
        return 1

    if confirm is None and sys.stdin.isatty():
        confirm = prompt_confirm

    ctx = ToolContext(
        lg=lg,
        cfg=cfg,
        out=out if out is not None else ConsoleOutput(),
        env=env,
        clients_root=args.clients_root,
        schemas_root=args.schemas_root,
        confirm=confirm,
    )
    kwargs: dict[str, Any] = {k: v for k, v in vars(args).items() if k != "_tool"}
    try:
        return tool.bind(ctx).run(**kwargs)
    except MultiDBError as e:
        lg.error(f"{tool.name} failed", extra={"exception": e})
        return 1
    finally:
        ctx.close()


__all__ = ["main", "build_parser", "prompt_confirm", "UsageError"]


if __name__ == "__main__":
    sys.exit(main())
