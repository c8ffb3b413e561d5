"""Tests for CLI output abstraction."""

import io

import pytest

from multidb.cli.output import BufferedOutput, ConsoleOutput, format_table


@pytest.mark.unit
class TestConsoleOutput:
    """Tests for ConsoleOutput class."""

    def test_write_to_stdout_by_default(self, capsys):
        out = ConsoleOutput()
        out.write("Hello")
        out.write("World")

        captured = capsys.readouterr()
        assert captured.out == "Hello\nWorld\n"

    def test_write_empty_string(self, capsys):
        ConsoleOutput().write()
        assert capsys.readouterr().out == "\n"

    def test_write_to_custom_stream(self):
        buffer = io.StringIO()
        out = ConsoleOutput(buffer)
        out.write("Test line")
        out.flush()
        assert buffer.getvalue() == "Test line\n"


@pytest.mark.unit
class TestBufferedOutput:
    """Tests for BufferedOutput class."""

    def test_captures_lines(self):
        out = BufferedOutput()
        out.write("Line 1")
        out.write("Line 2")
        assert out.lines == ["Line 1", "Line 2"]
        assert out.text == "Line 1\nLine 2\n"

    def test_multiline_write_is_split(self):
        out = BufferedOutput()
        out.write("a\nb")
        assert out.lines == ["a", "b"]

    def test_lines_is_a_copy(self):
        out = BufferedOutput()
        out.write("x")
        out.lines.append("y")
        assert out.lines == ["x"]

    def test_empty(self):
        out = BufferedOutput()
        assert out.lines == []
        assert out.text == ""

    def test_clear(self):
        out = BufferedOutput()
        out.write("x")
        out.clear()
        assert out.lines == []


@pytest.mark.unit
class TestFormatTable:
    """Tests for format_table()."""

    def test_columns_aligned(self):
        lines = format_table([("orders", "ok"), ("billing", "FAIL")])
        assert lines == ["  orders   ok", "  billing  FAIL"]

    def test_trailing_space_stripped(self):
        lines = format_table([("a", "ok", ""), ("bb", "FAIL", "boom")])
        assert lines[0] == "  a   ok"
        assert lines[1] == "  bb  FAIL  boom"

    def test_custom_indent(self):
        assert format_table([("x",)], indent=0) == ["x"]

    def test_ragged_rows(self):
        lines = format_table([("name", "valid", "postgresql"), ("broken", "invalid")])
        assert lines[1] == "  broken  invalid"

    def test_empty(self):
        assert format_table([]) == []
