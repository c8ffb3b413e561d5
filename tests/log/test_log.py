"""
Tests for the logging package.

Covers:
- Level resolution (names, numbers, "false")
- Formatter output with extra fields and exceptions
- Derived "view" loggers and their naming
- TRACE level and disabled logging
"""

import logging
from io import StringIO

import pytest

from multidb.log import (
    InvalidLogLevelError,
    LogConfig,
    LoggerFactory,
    create_root_lg,
    resolve_level,
)
from multidb.log.formatters import LogFormatter, _format_value

# =============================================================================
# Levels and config
# =============================================================================


@pytest.mark.unit
class TestLevels:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("info", logging.INFO),
            ("DEBUG", logging.DEBUG),
            ("trace", 5),
            ("false", False),
            ("30", 30),
            (10, 10),
            (False, False),
        ],
    )
    def test_resolve_level(self, raw, expected):
        assert resolve_level(raw) == expected

    def test_invalid_level(self):
        with pytest.raises(InvalidLogLevelError, match="verbose"):
            resolve_level("verbose")

    def test_from_config(self):
        config = LogConfig.from_config({"level": "warning", "colors": False, "micros": True})
        assert config == LogConfig(level=logging.WARNING, micros=True, colors=False)

    def test_from_config_disabled(self):
        assert LogConfig.from_config({"level": "false"}).level is False

    def test_from_config_none(self):
        assert LogConfig.from_config(None) == LogConfig()

    def test_true_means_info(self):
        assert LogConfig.from_params(True).level == logging.INFO


# =============================================================================
# Formatting
# =============================================================================


def _record(msg="message", level=logging.INFO, **extra):
    lg = create_root_lg("debug", colors=False, stream=StringIO())
    return lg.makeRecord("/db", level, __file__, 1, msg, (), None, extra=extra)


@pytest.mark.unit
class TestFormatter:
    def test_plain_line(self):
        line = LogFormatter(LogConfig(colors=False)).format(_record("connected"))
        assert "[I] connected" in line
        assert line.endswith("[/db]")

    def test_extra_fields_sorted(self):
        record = _record("connected", url="sqlite:///x.db", db="cache")
        line = LogFormatter(LogConfig(colors=False)).format(record)
        assert line.index("[db:cache]") < line.index("[url:sqlite:///x.db]")

    def test_exception_field(self):
        record = _record("connect failed", exception=ConnectionError("refused"))
        line = LogFormatter(LogConfig(colors=False)).format(record)
        first, second = line.split("\n")
        assert "[exception:ConnectionError]" in first
        assert second.strip() == "ConnectionError: refused"

    def test_colors(self):
        line = LogFormatter(LogConfig(colors=True)).format(_record(level=logging.ERROR))
        assert line.startswith("\x1b[31m")
        assert line.endswith("\x1b[0m")

    @pytest.mark.parametrize(
        "value,expected",
        [(["a", "b"], "a,b"), (0.5, "0.500"), (3, "3"), (None, "None")],
    )
    def test_format_value(self, value, expected):
        assert _format_value(value) == expected


# =============================================================================
# Loggers
# =============================================================================


@pytest.mark.unit
class TestLoggers:
    def test_root_writes_to_stream(self, lg, log_stream):
        lg.info("hello", extra={"count": 2})
        output = log_stream.getvalue()
        assert "hello" in output
        assert "[count:2]" in output
        assert "[/]" in output

    def test_derive_names(self, lg):
        assert LoggerFactory.derive(lg, "db").name == "/db"
        assert LoggerFactory.derive(lg, ["db", "registry"]).name == "/db/registry"

    def test_derive_nested(self, lg):
        db = LoggerFactory.derive(lg, "db")
        assert LoggerFactory.derive(db, "health").name == "/db/health"

    def test_derive_reuses_view(self, lg):
        first = LoggerFactory.derive(lg, ["db", "registry"])
        assert LoggerFactory.derive(lg, ["db", "registry"]) is first

    def test_derive_from_new_root_creates_new_view(self, lg):
        first = LoggerFactory.derive(lg, "db")
        other_root = create_root_lg("info", colors=False, stream=StringIO())
        assert LoggerFactory.derive(other_root, "db") is not first

    def test_derived_writes_through_root(self, lg, log_stream):
        LoggerFactory.derive(lg, ["db", "registry"]).info("added database")
        assert "[/db/registry]" in log_stream.getvalue()

    def test_derive_plain_logger_passthrough(self):
        plain = logging.getLogger("plain-test-logger")
        assert LoggerFactory.derive(plain, "db") is plain

    def test_level_filtering(self):
        stream = StringIO()
        root = create_root_lg("warning", colors=False, stream=stream)
        view = LoggerFactory.derive(root, "db")
        view.info("hidden")
        view.warning("shown")
        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_trace(self, log_stream):
        root = create_root_lg("trace", colors=False, stream=log_stream)
        root.trace("fine detail")
        assert "[T] fine detail" in log_stream.getvalue()

    def test_trace_filtered_at_debug(self, lg, log_stream):
        lg.trace("fine detail")
        assert log_stream.getvalue() == ""

    def test_disabled(self):
        stream = StringIO()
        root = create_root_lg("false", colors=False, stream=stream)
        root.error("nothing")
        LoggerFactory.derive(root, "db").critical("nothing either")
        assert stream.getvalue() == ""
        assert root.disabled
