"""Context-aware autocomplete for the library shell.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline in the REPL, JSON in the
web UI).

Two contexts, decided by the cursor position:

- **Command position** — nothing but the first word has been typed.
  Candidates are the command vocabulary filtered by exact prefix.  The
  filter is deliberately stricter than error correction so the ghost
  text never jumps to an unrelated command mid-word.
- **Argument position** — the command declares what kind of path it
  takes (directory, file, either, or none).  The last token is split
  at its final ``/``; the part before is resolved against the working
  directory and its children are filtered by the part after.

A separate did-you-mean path (``fuzzy_path_suggestions``) lists the same
children but ranks them with the fuzzy engine.  The dispatcher uses it
after a path fails to resolve.
"""

from __future__ import annotations

import re
import readline
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from py_shelf.errors import ShellError
from py_shelf.fs.nodes import DirectoryNode, FileNode, display_title
from py_shelf.fs.paths import get_node_at_path, resolve_path, sorted_children
from py_shelf.fuzzy import rank_candidates
from py_shelf.logging import LogLevel
from py_shelf.parser import canonical_name

if TYPE_CHECKING:
    from py_shelf.shell import Shell

# The command vocabulary, in suggestion order.
COMMANDS: tuple[str, ...] = (
    "help",
    "cd",
    "ls",
    "open",
    "cat",
    "search",
    "tree",
    "home",
    "back",
    "clear",
    "summary",
    "pwd",
    "history",
)

FUZZY_PATH_LIMIT = 6

_TRAILING_TOKEN = re.compile(r"(\S*)$")


class SuggestionKind(StrEnum):
    """What a suggestion would insert."""

    COMMAND = "command"
    DIRECTORY = "dir"
    FILE = "file"


class PathMode(StrEnum):
    """What kind of path a command accepts as its argument."""

    DIRECTORY = "dir"
    FILE = "file"
    EITHER = "either"
    NONE = "none"


class CompletionMode(StrEnum):
    """Which context produced a completion."""

    NONE = "none"
    COMMAND = "command"
    PATH = "path"


# Commands whose argument is a path, and which kind.
PATH_MODES: dict[str, PathMode] = {
    "cd": PathMode.DIRECTORY,
    "cat": PathMode.FILE,
    "open": PathMode.EITHER,
    "tree": PathMode.EITHER,
}


@dataclass(frozen=True)
class Suggestion:
    """One autocomplete candidate."""

    kind: SuggestionKind
    insert_text: str
    label: str


@dataclass(frozen=True)
class Completion:
    """The result of analysing an in-progress input line.

    Attributes:
        suggestions: Candidates, best first.
        ghost_suffix: Untyped remainder of the top candidate.
        before_token: Everything before the token being completed.
        quote_char: The opening quote of the token, if any.
        token_prefix: The token without its opening quote.
        mode: Which context produced the suggestions.

    """

    suggestions: list[Suggestion] = field(default_factory=lambda: [])  # noqa: PIE807
    ghost_suffix: str = ""
    before_token: str = ""
    quote_char: str | None = None
    token_prefix: str = ""
    mode: CompletionMode = CompletionMode.NONE


def path_mode_for(command: str) -> PathMode:
    """Return the path mode declared by *command* (after aliases)."""
    return PATH_MODES.get(canonical_name(command), PathMode.NONE)


def _list_directory(root: DirectoryNode, cwd: str, token: str) -> tuple[str, str, DirectoryNode] | None:
    """Resolve the directory part of *token*.

    Returns:
        ``(rebuild_prefix, base, directory)`` or None if the directory
        part does not resolve to a directory.

    """
    last_slash = token.rfind("/")
    rebuild_prefix = "" if last_slash == -1 else token[: last_slash + 1]
    dir_token = "" if last_slash == -1 else token[:last_slash]
    base = token if last_slash == -1 else token[last_slash + 1 :]

    if not dir_token:
        dir_token = "/" if token.startswith("/") else "."
    try:
        resolved = resolve_path(root, cwd, dir_token)
    except ShellError:
        return None

    node = get_node_at_path(root, resolved)
    if not isinstance(node, DirectoryNode):
        return None
    return rebuild_prefix, base, node


def _accepts(mode: PathMode, node: DirectoryNode | FileNode) -> bool:
    """Return True if *node* is the kind of path *mode* asks for."""
    match mode:
        case PathMode.DIRECTORY:
            return isinstance(node, DirectoryNode)
        case PathMode.FILE:
            return isinstance(node, FileNode)
        case PathMode.EITHER:
            return True
        case PathMode.NONE:
            return False


def _suggestion(rebuild_prefix: str, name: str, node: DirectoryNode | FileNode) -> Suggestion:
    """Build the suggestion for one child."""
    is_dir = isinstance(node, DirectoryNode)
    insert_text = f"{rebuild_prefix}{name}{'/' if is_dir else ''}"
    title = display_title(node, name)
    return Suggestion(
        kind=SuggestionKind.DIRECTORY if is_dir else SuggestionKind.FILE,
        insert_text=insert_text,
        label=f"{insert_text} — {title}" if title else insert_text,
    )


def path_suggestions(root: DirectoryNode, cwd: str, token: str, mode: PathMode) -> list[Suggestion]:
    """Return prefix-filtered path completions for *token*.

    Args:
        root: The content tree.
        cwd: The working directory.
        token: The partial path typed so far.
        mode: Which kinds of node to offer.

    Returns:
        Matching children, directories first.

    """
    listing = _list_directory(root, cwd, token)
    if listing is None:
        return []
    rebuild_prefix, base, directory = listing
    base_lower = base.lower()

    return [
        _suggestion(rebuild_prefix, name, child)
        for name, child in sorted_children(directory)
        if name.lower().startswith(base_lower) and _accepts(mode, child)
    ]


def fuzzy_path_suggestions(
    root: DirectoryNode, cwd: str, token: str, mode: PathMode, limit: int = FUZZY_PATH_LIMIT
) -> list[Suggestion]:
    """Return did-you-mean path suggestions for a path that failed.

    Same listing as ``path_suggestions`` but ranked by the fuzzy engine
    instead of filtered by prefix.
    """
    listing = _list_directory(root, cwd, token)
    if listing is None:
        return []
    rebuild_prefix, base, directory = listing

    candidates = [name for name, child in sorted_children(directory) if _accepts(mode, child)]
    ranked = rank_candidates(base, candidates, limit)
    return [_suggestion(rebuild_prefix, name, directory.children[name]) for name in ranked]


def command_suggestions(prefix: str) -> list[Suggestion]:
    """Return the commands starting with *prefix* (lowercased)."""
    lowered = prefix.lower()
    return [
        Suggestion(kind=SuggestionKind.COMMAND, insert_text=name, label=name)
        for name in COMMANDS
        if name.startswith(lowered)
    ]


class Completer:
    """Context-aware completer attached to a shell."""

    def __init__(self, shell: Shell) -> None:
        """Create a completer attached to a shell instance.

        Args:
            shell: The shell whose tree, working directory, and
                onboarding state drive completion.

        """
        self._shell = shell
        self._matches: list[str] = []

    def complete(self, line: str) -> Completion:
        """Analyse *line* and return the suggestions for its last token."""
        if self._shell.onboarding.active:
            return Completion()

        trimmed = line.lstrip()
        if not trimmed:
            return Completion()

        match = _TRAILING_TOKEN.search(line)
        raw_token = match.group(1) if match else ""
        before_token = line[: len(line) - len(raw_token)]
        quote_char = raw_token[0] if raw_token[:1] in ('"', "'") else None
        token_prefix = raw_token[1:] if quote_char else raw_token

        if not any(char.isspace() for char in trimmed):
            suggestions = command_suggestions(token_prefix)
            return Completion(
                suggestions=suggestions,
                ghost_suffix=self._ghost(suggestions, token_prefix),
                before_token=before_token,
                quote_char=quote_char,
                token_prefix=token_prefix,
                mode=CompletionMode.COMMAND,
            )

        mode = path_mode_for(trimmed.split()[0])
        root = self._shell.root
        if mode is PathMode.NONE or root is None:
            return Completion(
                before_token=before_token, quote_char=quote_char, token_prefix=token_prefix
            )

        suggestions = path_suggestions(root, self._shell.state.cwd, token_prefix, mode)
        return Completion(
            suggestions=suggestions,
            ghost_suffix=self._ghost(suggestions, token_prefix),
            before_token=before_token,
            quote_char=quote_char,
            token_prefix=token_prefix,
            mode=CompletionMode.PATH,
        )

    def preview(self, line: str) -> str | None:
        """Return what *line* would become if the top suggestion were accepted.

        Returns:
            The new line, or None if there is nothing to complete.

        """
        completion = self.complete(line)
        if not completion.suggestions:
            return None

        top = completion.suggestions[0]
        token = f"{completion.quote_char or ''}{top.insert_text}"
        if completion.mode is CompletionMode.COMMAND:
            append_space = True
        else:
            append_space = top.kind is not SuggestionKind.DIRECTORY and not top.insert_text.endswith("/")
        return f"{completion.before_token}{token}{' ' if append_space else ''}"

    def accept(self, line: str) -> str | None:
        """Apply the top suggestion to *line* (the Tab key) and log it."""
        accepted = self.preview(line)
        if accepted is None:
            return None
        self._shell.logger.log(LogLevel.DEBUG, f"Completed {line!r} to {accepted!r}", source="completer")
        return accepted

    def readline_complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*.

        Args:
            text: The partial word being completed.
            state: Index into the candidate list (0, 1, 2, …).

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        if state == 0:
            completion = self.complete(readline.get_line_buffer())
            quote = completion.quote_char or ""
            self._matches = [f"{quote}{s.insert_text}" for s in completion.suggestions]
        if state < len(self._matches):
            return self._matches[state]
        return None

    @staticmethod
    def _ghost(suggestions: list[Suggestion], typed: str) -> str:
        """Return the untyped remainder of the top suggestion."""
        if not suggestions:
            return ""
        return suggestions[0].insert_text[len(typed) :]
