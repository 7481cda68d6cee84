"""Shell errors — every failure a visitor can cause is recoverable.

Malformed input is data, not a crash.  Each error carries a message and
up to four **fix suggestions**: complete command strings the visitor
can type next.  The dispatcher catches ``ShellError`` at a single point
and turns it into an error entry in the display log; nothing else in the
session changes.

The hierarchy mirrors the kinds of things that go wrong:

- **ParseError** — an unclosed quote.
- **UnknownCommandError** — the command name is not in the table.
- **PathNotFoundError** — a path segment does not exist.
- **NotADirectoryShellError** / **IsADirectoryShellError** — the path
  exists but has the wrong type for the command.
- **MissingArgumentError** — a required argument was not supplied.
- **FilesystemUnavailableError** — the shell has no content tree.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_FIXES = 4


@dataclass(frozen=True)
class FixSuggestion:
    """An executable replacement command offered alongside an error.

    Attributes:
        command: The command string to run.
        label: What to show the visitor (may include a title).

    """

    command: str
    label: str

    @classmethod
    def of(cls, command: str) -> FixSuggestion:
        """Create a suggestion whose label is the command itself."""
        return cls(command=command, label=command)


class ShellError(Exception):
    """Base class for recoverable shell errors."""

    def __init__(self, message: str, fixes: list[FixSuggestion] | None = None) -> None:
        """Create an error with an optional list of fixes.

        Args:
            message: Human-readable description of the failure.
            fixes: Suggested replacement commands; only the first
                ``MAX_FIXES`` are kept.

        """
        super().__init__(message)
        self.message = message
        self.fixes: list[FixSuggestion] = list(fixes or [])[:MAX_FIXES]


class ParseError(ShellError):
    """Raise when the input line cannot be tokenized."""


class UnknownCommandError(ShellError):
    """Raise when the command name is not recognised."""


class PathNotFoundError(ShellError):
    """Raise when a path does not resolve to a node."""


class NotADirectoryShellError(ShellError):
    """Raise when a directory was required but a file was found."""


class IsADirectoryShellError(ShellError):
    """Raise when a file was required but a directory was found."""


class MissingArgumentError(ShellError):
    """Raise when a command is missing a required argument."""


class FilesystemUnavailableError(ShellError):
    """Raise when the shell was started without a content tree."""
