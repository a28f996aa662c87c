"""Session logging — a structured audit trail of interpreter events.

Every terminal session keeps a log of what the interpreter did: which
commands ran, which aliases and history references were expanded, what
failed and why.  The log is an in-memory buffer, much like a kernel's
``dmesg`` ring, and the ``log`` command prints it back to the user.

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — an append-only, size-bounded log with filtering.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Bounded buffer** — the oldest entries are dropped once the log
      reaches its capacity, so a long session cannot grow it forever.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum

DEFAULT_LOG_CAPACITY = 500


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "router").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only log buffer with filtering.

    Components share one logger per session and tag their entries with
    a ``source`` so the log can be narrowed down later.
    """

    def __init__(self, *, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        """Create an empty logger.

        Args:
            capacity: Maximum number of entries kept; older ones are
                discarded first.

        """
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log."""
        self._entries.append(LogEntry(level=level, message=message, source=source))

    def debug(self, message: str, *, source: str) -> None:
        """Append a DEBUG entry."""
        self.log(LogLevel.DEBUG, message, source=source)

    def info(self, message: str, *, source: str) -> None:
        """Append an INFO entry."""
        self.log(LogLevel.INFO, message, source=source)

    def warning(self, message: str, *, source: str) -> None:
        """Append a WARNING entry."""
        self.log(LogLevel.WARNING, message, source=source)

    def error(self, message: str, *, source: str) -> None:
        """Append an ERROR entry."""
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
        result = list(self._entries)
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of entries currently held."""
        return len(self._entries)
