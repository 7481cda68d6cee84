"""Session state — where the visitor is and what they have seen.

A session tracks three independent sequences:

- **Path history** — every working directory visited, newest last.
  The first entry is the floor: ``back`` never pops it, so the history
  is never empty and the current directory is always its last element.
- **Command history** — the raw command strings submitted, for
  up/down recall at the prompt.
- **Display log** — what the terminal shows, as entries tagged
  ``command``, ``output``, ``error`` or ``banner``.

State only changes through the transition methods below, and each
method performs its whole change before returning, so an observer
between two commands never sees a half-applied update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from py_shelf.errors import FixSuggestion
from py_shelf.fs.paths import ROOT_PATH

DEFAULT_BANNER_TEXT = """\
             py-shelf
   a library you browse like a shell

  Commands: help, cd, ls, open, cat, search, tree, home, back, clear, summary
  Type 'help' to begin."""


class EntryKind(StrEnum):
    """The tag on a display-log entry."""

    COMMAND = "command"
    OUTPUT = "output"
    ERROR = "error"
    BANNER = "banner"


@dataclass(frozen=True)
class DisplayEntry:
    """One item in the display log.

    Attributes:
        kind: What sort of entry this is.
        text: The text to show.
        path: For command echoes, the working directory at submission.
        fixes: For errors, the suggested replacement commands.

    """

    kind: EntryKind
    text: str
    path: str | None = None
    fixes: tuple[FixSuggestion, ...] = ()

    def render(self) -> str:
        """Format the entry as plain terminal text."""
        match self.kind:
            case EntryKind.COMMAND:
                return f"~{self.path} $ {self.text}"
            case EntryKind.ERROR if self.fixes:
                labels = "  ".join(fix.label for fix in self.fixes)
                return f"{self.text}\nDid you mean: {labels}  (type one to run)"
            case _:
                return self.text


DEFAULT_BANNER = DisplayEntry(kind=EntryKind.BANNER, text=DEFAULT_BANNER_TEXT)


@dataclass
class SessionState:
    """The mutable state of one visitor session."""

    entries: list[DisplayEntry] = field(default_factory=lambda: [DEFAULT_BANNER])
    commands: list[str] = field(default_factory=lambda: [])  # noqa: PIE807
    paths: list[str] = field(default_factory=lambda: [ROOT_PATH])

    @classmethod
    def start(cls, initial_cwd: str = ROOT_PATH, banner: DisplayEntry | None = None) -> SessionState:
        """Create a fresh session with one banner and an initial path."""
        return cls(entries=[banner or DEFAULT_BANNER], commands=[], paths=[initial_cwd])

    @property
    def cwd(self) -> str:
        """Return the current working directory."""
        return self.paths[-1]

    def add_entry(self, entry: DisplayEntry) -> None:
        """Append an entry to the display log."""
        self.entries.append(entry)

    def add_command(self, command: str) -> None:
        """Record a submitted command string."""
        self.commands.append(command)

    def clear_entries(self) -> None:
        """Drop every entry except banners (restoring the default if none)."""
        banners = [entry for entry in self.entries if entry.kind is EntryKind.BANNER]
        self.entries = banners or [DEFAULT_BANNER]

    def set_cwd(self, path: str) -> None:
        """Move to *path*, recording it in the path history."""
        self.paths.append(path)

    def go_back(self) -> bool:
        """Return to the previous directory.

        Returns:
            True if a step was popped, False if already at the floor.

        """
        if len(self.paths) <= 1:
            return False
        self.paths.pop()
        return True

    def replace(self, other: SessionState) -> None:
        """Replace this state wholesale with a copy of *other*."""
        self.entries[:] = other.entries
        self.commands[:] = other.commands
        self.paths[:] = other.paths


class CommandRecall:
    """Up/down navigation through the command history.

    The pointer is None while the visitor is typing fresh input.
    ``up`` starts at the newest command and stops at the oldest;
    ``down`` walks back toward the newest and, past it, returns to
    fresh (empty) input.
    """

    def __init__(self, commands: list[str]) -> None:
        """Create a recall cursor over a live command list."""
        self._commands = commands
        self._pointer: int | None = None

    @property
    def pointer(self) -> int | None:
        """Return the index of the recalled command, if any."""
        return self._pointer

    def up(self) -> str | None:
        """Recall the previous command, or None if there is no history."""
        if not self._commands:
            return None
        self._pointer = len(self._commands) - 1 if self._pointer is None else max(0, self._pointer - 1)
        return self._commands[self._pointer]

    def down(self) -> str | None:
        """Recall the next command; ``""`` once past the newest."""
        if not self._commands or self._pointer is None:
            return None
        self._pointer += 1
        if self._pointer >= len(self._commands):
            self._pointer = None
            return ""
        return self._commands[self._pointer]

    def reset(self) -> None:
        """Forget the recall position (the visitor typed something)."""
        self._pointer = None
