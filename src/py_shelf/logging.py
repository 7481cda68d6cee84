"""Session audit log.

The display log is what the visitor sees.  The audit log is what the
operator sees: a structured record of what each session did (where it
went, what it read, which errors it hit), kept in memory and queryable
by level and subsystem.

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — a bounded log with filtering and clearing.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Filter returns a list, not a generator** — callers usually want
      to iterate it more than once.
    - **Bounded by a deque** so a long-lived session cannot grow the log
      without limit.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum


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
        source: The subsystem that generated the event (e.g. "shell").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Bounded log buffer with filtering.

    A web session can stay open for a long time, so the log keeps at
    most ``max_entries`` records and drops the oldest first.  ``dropped``
    counts how many were lost that way.
    """

    def __init__(
        self, *, min_level: LogLevel = LogLevel.DEBUG, max_entries: int | None = None
    ) -> None:
        """Create an empty logger.

        Args:
            min_level: Entries below this level are discarded on arrival.
            max_entries: Upper bound on retained entries (unbounded if None).

        Raises:
            ValueError: If *max_entries* is not positive.

        """
        if max_entries is not None and max_entries < 1:
            msg = f"max_entries must be positive, got {max_entries}"
            raise ValueError(msg)
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._min_level = min_level
        self._dropped = 0

    @property
    def entries(self) -> list[LogEntry]:
        """Return the retained entries in chronological order."""
        return list(self._entries)

    @property
    def dropped(self) -> int:
        """Return how many entries were evicted to respect the bound."""
        return self._dropped

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Subsystem that generated the event.

        """
        if level < self._min_level:
            return
        if self._entries.maxlen is not None and len(self._entries) == self._entries.maxlen:
            self._dropped += 1
        self._entries.append(LogEntry(level=level, message=message, source=source))

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
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
        ]

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()
        self._dropped = 0
