"""Diagnostic logging — structured messages that belong on stderr.

A well-behaved command-line program never mixes its chatter into
stdout, because stdout may be feeding another program.  Progress notes,
warnings, and errors go to stderr instead.

Our logger follows the same shape as a kernel log buffer:

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — an append-only buffer that also echoes entries at or
  above a threshold to a stream (normally the program's stderr).

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Every entry is buffered**, even those below the echo threshold,
      so lessons and tests can inspect what happened after the fact.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from py_stdio.env import Environment

LOG_LEVEL_VAR = "PY_STDIO_LOG_LEVEL"


class LogLevel(IntEnum):
    """Severity levels for log entries.

    Using IntEnum means levels compare with ``<`` / ``>`` naturally,
    which makes minimum-level filtering trivial.
    """

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


def level_from_env(env: Environment, default: LogLevel = LogLevel.WARNING) -> LogLevel:
    """Read the echo threshold from ``PY_STDIO_LOG_LEVEL``.

    Unknown or missing names fall back to *default*.
    """
    name = (env.get(LOG_LEVEL_VAR) or "").strip().upper()
    return LogLevel.__members__.get(name, default)


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The program that generated the event (e.g. "cp").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only log buffer that echoes to a stream.

    The logger collects ``LogEntry`` records and provides simple
    querying by level and/or source.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        min_level: LogLevel = LogLevel.INFO,
        *,
        parent: Logger | None = None,
    ) -> None:
        """Create an empty logger.

        Args:
            stream: Where to echo entries (``None`` keeps them buffered only).
            min_level: Entries below this level are buffered but not echoed.
            parent: Another logger that receives every entry, whatever
                its level; it echoes by its own threshold.  A shell keeps
                the log of all the programs it ran this way.

        """
        self._entries: list[LogEntry] = []
        self._stream = stream
        self._min_level = min_level
        self._parent = parent

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry, echo it if severe enough, and pass it to the parent.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Program that generated the event.

        """
        entry = LogEntry(level=level, message=message, source=source)
        self._entries.append(entry)
        if self._stream is not None and level >= self._min_level:
            self._stream.write(f"{entry}\n")
        if self._parent is not None:
            self._parent.log(level, message, source=source)

    def debug(self, message: str, *, source: str) -> None:
        """Log at DEBUG."""
        self.log(LogLevel.DEBUG, message, source=source)

    def info(self, message: str, *, source: str) -> None:
        """Log at INFO."""
        self.log(LogLevel.INFO, message, source=source)

    def warning(self, message: str, *, source: str) -> None:
        """Log at WARNING."""
        self.log(LogLevel.WARNING, message, source=source)

    def error(self, message: str, *, source: str) -> None:
        """Log at ERROR."""
        self.log(LogLevel.ERROR, message, source=source)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()
