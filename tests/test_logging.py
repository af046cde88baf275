"""Tests for the diagnostic logger.

Diagnostics belong on stderr.  The logger buffers structured entries
and echoes the ones at or above a threshold to a stream.
"""

import io

from py_stdio.env import Environment
from py_stdio.logging import LOG_LEVEL_VAR, LogEntry, Logger, LogLevel, level_from_env


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_str(self) -> None:
        """String form should be [LEVEL] source: message."""
        entry = LogEntry(level=LogLevel.WARNING, message="disk full", source="cp")
        assert str(entry) == "[WARNING] cp: disk full"


class TestLogger:
    """Verify buffering, echoing, and filtering."""

    def test_log_stores_entries(self) -> None:
        """Logged entries should be retrievable in order."""
        logger = Logger()
        logger.info("first", source="test")
        logger.info("second", source="test")
        assert [e.message for e in logger.entries] == ["first", "second"]

    def test_echo_at_or_above_threshold(self) -> None:
        """Entries at or above min_level should be written to the stream."""
        stream = io.StringIO()
        logger = Logger(stream=stream, min_level=LogLevel.WARNING)
        logger.warning("careful", source="cat")
        logger.error("broken", source="cat")
        assert stream.getvalue() == "[WARNING] cat: careful\n[ERROR] cat: broken\n"

    def test_below_threshold_buffered_not_echoed(self) -> None:
        """Quiet entries should still be kept in the buffer."""
        stream = io.StringIO()
        logger = Logger(stream=stream, min_level=LogLevel.WARNING)
        logger.debug("detail", source="cp")
        assert stream.getvalue() == ""
        assert len(logger.entries) == 1

    def test_parent_records_entries(self) -> None:
        """A parent logger should receive every entry."""
        parent = Logger()
        child = Logger(parent=parent)
        child.debug("from child", source="wc")
        assert parent.entries[0].message == "from child"

    def test_parent_gets_entries_below_child_threshold(self) -> None:
        """The child's threshold only gates its own echo; the parent echoes by its own."""
        parent_stream = io.StringIO()
        child_stream = io.StringIO()
        parent = Logger(stream=parent_stream, min_level=LogLevel.DEBUG)
        child = Logger(stream=child_stream, min_level=LogLevel.ERROR, parent=parent)
        child.debug("detail", source="cp")
        assert child_stream.getvalue() == ""
        assert parent_stream.getvalue() == "[DEBUG] cp: detail\n"
        assert [e.level for e in parent.entries] == [LogLevel.DEBUG]

    def test_filter_by_level(self) -> None:
        """filter(min_level=...) should drop lower levels."""
        logger = Logger()
        logger.debug("d", source="a")
        logger.error("e", source="a")
        assert [e.message for e in logger.filter(min_level=LogLevel.ERROR)] == ["e"]

    def test_filter_by_source(self) -> None:
        """filter(source=...) should keep only that source."""
        logger = Logger()
        logger.info("x", source="cp")
        logger.info("y", source="cat")
        assert [e.message for e in logger.filter(source="cat")] == ["y"]

    def test_filter_returns_copy(self) -> None:
        """Mutating a filter result should not change the log."""
        logger = Logger()
        logger.info("x", source="cp")
        logger.filter().clear()
        assert len(logger.entries) == 1

    def test_clear(self) -> None:
        """clear() should remove all entries."""
        logger = Logger()
        logger.info("x", source="cp")
        logger.clear()
        assert logger.entries == []


class TestLevelFromEnv:
    """Verify reading the threshold from the environment."""

    def test_known_level(self) -> None:
        """A valid level name should be used, case-insensitively."""
        env = Environment({LOG_LEVEL_VAR: "debug"})
        assert level_from_env(env) is LogLevel.DEBUG

    def test_missing_uses_default(self) -> None:
        """Without the variable the default applies."""
        assert level_from_env(Environment()) is LogLevel.WARNING

    def test_unknown_uses_default(self) -> None:
        """An unknown name should fall back to the default."""
        env = Environment({LOG_LEVEL_VAR: "loud"})
        assert level_from_env(env, LogLevel.INFO) is LogLevel.INFO
