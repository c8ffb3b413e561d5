"""
Wrapper around the external migration tool.

Every invocation is ``[*command, *args, "--schema", <schema path>]``, run in
the project directory. The tool's own output goes straight to the terminal.
"""

from __future__ import annotations

import shlex
import subprocess
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..exceptions import MigrationToolError
from ..log import LoggerFactory

DEFAULT_COMMAND = ("npx", "prisma")


class MigrationTool:
    """Runs the migration tool synchronously."""

    def __init__(
        self,
        lg: Any,
        command: str | Sequence[str] | None = None,
        timeout: float | None = None,
        cwd: str | Path | None = None,
    ) -> None:
        """
        Args:
            lg: Logger instance
            command: Tool command, as a list or a shell-style string
            timeout: Seconds before an invocation is killed (None waits forever)
            cwd: Working directory for invocations
        """
        if lg is None:
            raise ValueError("Logger cannot be None")
        if command is None:
            command = DEFAULT_COMMAND
        elif isinstance(command, str):
            command = shlex.split(command)
        if not command:
            raise ValueError("Migration tool command cannot be empty")

        self._lg = LoggerFactory.derive(lg, ["db", "tool"])
        self.command = list(command)
        self.timeout = timeout
        self.cwd = Path(cwd) if cwd is not None else None

    def build_args(self, args: Sequence[str], schema_path: str | Path) -> list[str]:
        return [*self.command, *args, "--schema", str(schema_path)]

    def run(self, args: Sequence[str], schema_path: str | Path) -> None:
        """
        Run one tool invocation.

        Raises:
            MigrationToolError: On non-zero exit, timeout, or missing executable
        """
        argv = self.build_args(args, schema_path)
        cmdline = shlex.join(argv)
        self._lg.debug("running", extra={"cmd": cmdline})

        start = time.monotonic()
        try:
            proc = subprocess.run(argv, cwd=self.cwd, timeout=self.timeout, check=False)
        except FileNotFoundError as e:
            raise MigrationToolError(
                f"Migration tool not found: {self.command[0]}", cmd=cmdline
            ) from e
        except subprocess.TimeoutExpired as e:
            raise MigrationToolError(
                f"Migration tool timed out after {self.timeout}s", cmd=cmdline
            ) from e

        elapsed = time.monotonic() - start
        if proc.returncode != 0:
            raise MigrationToolError(
                "Migration tool failed", returncode=proc.returncode, cmd=cmdline
            )
        self._lg.debug("done", extra={"cmd": cmdline, "after": f"{elapsed:.2f}s"})
