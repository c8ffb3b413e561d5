"""
Output abstraction for CLI tools.

Tools write through an OutputWriter so they can be tested without capturing
stdout. Diagnostics go to the logger (stderr), results go here.
"""

import sys
from collections.abc import Sequence
from typing import Protocol, TextIO


class OutputWriter(Protocol):
    """Protocol for CLI output writing."""

    def write(self, text: str = "") -> None:
        """Write text with trailing newline."""
        ...


class ConsoleOutput:
    """
    Output writer for a stream (stdout by default).

    Example:
        out = ConsoleOutput()
        out.write("orders (default)")
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def write(self, text: str = "") -> None:
        print(text, file=self._stream)

    def flush(self) -> None:
        self._stream.flush()


class BufferedOutput:
    """
    Output writer that captures lines in memory.

    Example:
        out = BufferedOutput()
        out.write("Line 1")
        assert out.lines == ["Line 1"]
        assert out.text == "Line 1\\n"
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def write(self, text: str = "") -> None:
        # Multi-line writes are split so assertions can work per line
        self._lines.extend(text.split("\n"))

    @property
    def lines(self) -> list[str]:
        return self._lines.copy()

    @property
    def text(self) -> str:
        return "\n".join(self._lines) + ("\n" if self._lines else "")

    def clear(self) -> None:
        self._lines.clear()


def format_table(rows: Sequence[Sequence[str]], indent: int = 2) -> list[str]:
    """
    Align rows into left-justified columns.

    Example:
        >>> format_table([("orders", "ok"), ("billing", "FAIL")])
        ['  orders   ok', '  billing  FAIL']
    """
    if not rows:
        return []
    widths = [0] * max(len(r) for r in rows)
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    lines = []
    for row in rows:
        cells = [cell.ljust(widths[i]) for i, cell in enumerate(row)]
        lines.append((" " * indent + "  ".join(cells)).rstrip())
    return lines
