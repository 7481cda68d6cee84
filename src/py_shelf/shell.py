"""The shell — command interpreter for the library.

The shell reads a command line, tokenizes it, dispatches it to a
handler, and records what happened in the session's display log.  It
is the single owner of the session state: every line is handled to
completion before the next is accepted.

Design choices:
    - **Returns strings, not prints.**  ``execute`` returns the text of
      the entries the line produced, so the shell is fully testable
      and the caller decides how to display output.
    - **Command dispatch via a dict.**  Adding a command means writing
      a method and adding one dict entry.
    - **Errors are exceptions inside, entries outside.**  Handlers raise
      ``ShellError`` subclasses; ``execute`` catches them at one point
      and appends an error entry with its fix suggestions.  Nothing
      else in the session changes on error.
    - **Notifications are injected callbacks.**  The presentation layer
      (sidebar highlight, address bar) is told about navigation through
      callables passed to the constructor, never through globals.
"""

from __future__ import annotations

from typing import TypeAlias

import random
from collections.abc import Callable
from dataclasses import dataclass

from py_shelf.completer import COMMANDS, PathMode, fuzzy_path_suggestions
from py_shelf.config import ShellConfig
from py_shelf.errors import (
    FilesystemUnavailableError,
    FixSuggestion,
    IsADirectoryShellError,
    MissingArgumentError,
    NotADirectoryShellError,
    PathNotFoundError,
    ShellError,
    UnknownCommandError,
)
from py_shelf.fs.nodes import DirectoryNode, FileNode, FilesystemNode, NodeMeta
from py_shelf.fs.paths import (
    ROOT_PATH,
    basename,
    get_node_at_path,
    join_path,
    parent_path,
    resolve_path,
    sorted_children,
)
from py_shelf.fuzzy import rank_candidates
from py_shelf.hints import TryChip, build_try_chips
from py_shelf.logging import Logger, LogLevel
from py_shelf.onboarding import Onboarding
from py_shelf.parser import parse_command
from py_shelf.session import CommandRecall, DisplayEntry, EntryKind, SessionState
from py_shelf.tree import parse_depth, render_tree

# Type alias for a command handler: takes a list of args, appends entries.
_Handler: TypeAlias = Callable[[list[str]], None]

EMPTY_FILE_TEXT = "(Empty file)"
BACK_AT_FLOOR_TEXT = "Already at root of session."
FS_UNAVAILABLE_TEXT = "FileSystem not loaded."

HELP_GRID = """\
Navigation  cd, home, back, pwd
Discovery   ls, search, tree
Reading     cat, open
System      clear, help, summary, history"""

SUMMARY_TEXT = """\
Quick start:
- ls
- cd <dir> | cd .. | cd /
- home
- cat <file>
- open <file|dir>
- search <term>
- tree [-L depth] [path]
- clear

Tip: Use up/down to cycle command history."""

_DEPTH_FLAGS = frozenset({"-L", "--depth"})


@dataclass(frozen=True)
class HighlightEvent:
    """Tell the presentation layer which directory and file are current."""

    directory_path: str
    file_path: str | None = None


HighlightSink: TypeAlias = Callable[[HighlightEvent], None]
NavigateSink: TypeAlias = Callable[[str], None]


def _ignore(_payload: object) -> None:
    """Discard a notification."""


class Shell:
    """Command interpreter over an immutable content tree.

    The shell may be created without a tree; every command past the
    onboarding detour then fails with ``FileSystem not loaded.``.
    """

    def __init__(
        self,
        *,
        root: DirectoryNode | None,
        config: ShellConfig | None = None,
        on_highlight: HighlightSink | None = None,
        on_navigate: NavigateSink | None = None,
        logger: Logger | None = None,
        rng: random.Random | None = None,
        banner: DisplayEntry | None = None,
    ) -> None:
        """Create a shell and start a fresh session.

        Args:
            root: The content tree, or None if it failed to load.
            config: Shell settings (defaults if omitted).
            on_highlight: Called with the current directory and file
                when ``open`` changes them.
            on_navigate: Called with the canonical path (or ``/<slug>``
                for a file) whenever the visitor moves or opens a file.
            logger: Audit log (a private one bounded by ``log_limit`` if
                omitted).
            rng: Randomness for try chips.
            banner: The banner entry (the default banner if omitted).

        Raises:
            ValueError: If the configured initial directory does not
                exist in the tree.

        """
        self._config = config or ShellConfig()
        self._root = root
        if root is not None and not isinstance(
            get_node_at_path(root, self._config.initial_cwd), DirectoryNode
        ):
            msg = f"Initial directory not found: {self._config.initial_cwd}"
            raise ValueError(msg)

        self._on_highlight: HighlightSink = on_highlight or _ignore
        self._on_navigate: NavigateSink = on_navigate or _ignore
        self._logger = logger or Logger(max_entries=self._config.log_limit)
        self._rng = rng or random.Random()
        self._state = SessionState.start(self._config.initial_cwd, banner)
        self._recall = CommandRecall(self._state.commands)
        self._onboarding = Onboarding()
        self._has_used_open = False
        self._last_opened_file: str | None = None
        self._produced: list[DisplayEntry] = []
        self._cleared = False

        # Command dispatch table — maps canonical command names to handlers.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "cd": self._cmd_cd,
            "ls": self._cmd_ls,
            "open": self._cmd_open,
            "cat": self._cmd_cat,
            "search": self._cmd_search,
            "tree": self._cmd_tree,
            "home": self._cmd_home,
            "back": self._cmd_back,
            "clear": self._cmd_clear,
            "summary": self._cmd_summary,
            "pwd": self._cmd_pwd,
            "history": self._cmd_history,
        }

    # -- Public surface ------------------------------------------------------

    @property
    def root(self) -> DirectoryNode | None:
        """Return the content tree, if one is loaded."""
        return self._root

    @property
    def state(self) -> SessionState:
        """Return the session state."""
        return self._state

    @property
    def config(self) -> ShellConfig:
        """Return the shell settings."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the audit log."""
        return self._logger

    @property
    def onboarding(self) -> Onboarding:
        """Return the onboarding state machine."""
        return self._onboarding

    @property
    def recall(self) -> CommandRecall:
        """Return the up/down command recall cursor."""
        return self._recall

    @property
    def has_used_open(self) -> bool:
        """Return True once ``open`` has been run in this session."""
        return self._has_used_open

    @property
    def command_names(self) -> list[str]:
        """Return the sorted list of command names."""
        return sorted(self._commands)

    @property
    def last_entries(self) -> list[DisplayEntry]:
        """Return the entries produced by the most recent line (echo excluded)."""
        return list(self._produced)

    @property
    def cleared(self) -> bool:
        """Return True if the most recent line cleared the display log."""
        return self._cleared

    def try_chips(self) -> list[TryChip]:
        """Return the suggestions to show under an empty prompt."""
        if self._root is None or self._onboarding.active or self._has_used_open:
            return []
        return build_try_chips(self._root, self._state.cwd, self._config.chip_count, self._rng)

    def execute(self, line: str) -> str:
        """Handle one submitted line.

        Args:
            line: The raw text the visitor submitted.

        Returns:
            The rendered text of the entries the line produced.

        """
        self._produced = []
        self._cleared = False
        if not line.strip():
            return ""

        self._state.add_entry(DisplayEntry(kind=EntryKind.COMMAND, text=line, path=self._state.cwd))
        self._state.add_command(line)
        self._recall.reset()

        try:
            self._dispatch(line)
        except ShellError as e:
            self._error(e)

        return "\n".join(entry.render() for entry in self._produced)

    # -- Dispatch ------------------------------------------------------------

    def _dispatch(self, line: str) -> None:
        """Parse *line* and route it to onboarding or a command handler."""
        parsed = parse_command(line)

        if self._onboarding.active:
            self._output(self._onboarding.answer(line))
            if not self._onboarding.active:
                self._logger.log(LogLevel.INFO, "Onboarding finished", source="onboarding")
            return

        if parsed is None:
            return

        if self._root is None:
            raise FilesystemUnavailableError(FS_UNAVAILABLE_TEXT)

        handler = self._commands.get(parsed.name)
        if handler is None:
            raise self._unknown_command(parsed.name, line)

        handler(parsed.args)

    def _unknown_command(self, name: str, raw: str) -> UnknownCommandError:
        """Build the error for an unknown command, with corrections."""
        stripped = raw.lstrip()
        first_space = stripped.find(" ")
        rest = "" if first_space == -1 else stripped[first_space:]
        candidates = rank_candidates(name, COMMANDS, self._config.fix_limit)
        fixes = (
            [FixSuggestion.of(f"{candidate}{rest}") for candidate in candidates]
            if candidates
            else [FixSuggestion.of("help")]
        )
        return UnknownCommandError(f"Command '{name}' not found.", fixes)

    # -- Entry helpers -------------------------------------------------------

    def _emit(self, entry: DisplayEntry) -> None:
        """Append an entry to the display log and to this line's output."""
        self._state.add_entry(entry)
        self._produced.append(entry)

    def _output(self, text: str) -> None:
        """Append an output entry."""
        self._emit(DisplayEntry(kind=EntryKind.OUTPUT, text=text))

    def _error(self, error: ShellError) -> None:
        """Append an error entry for *error*."""
        fixes = tuple(error.fixes[: self._config.fix_limit])
        self._emit(DisplayEntry(kind=EntryKind.ERROR, text=error.message, fixes=fixes))
        self._logger.log(LogLevel.WARNING, error.message, source="shell")

    def _tree_root(self) -> DirectoryNode:
        """Return the content tree (commands only run when it is loaded)."""
        if self._root is None:
            raise FilesystemUnavailableError(FS_UNAVAILABLE_TEXT)
        return self._root

    def _lookup(self, target: str) -> tuple[str, FilesystemNode] | None:
        """Resolve *target* and fetch its node, or None if either step fails."""
        root = self._tree_root()
        try:
            path = resolve_path(root, self._state.cwd, target)
        except PathNotFoundError:
            return None
        node = get_node_at_path(root, path)
        if node is None:
            return None
        return path, node

    def _path_fixes(
        self, target: str, mode: PathMode, prefix: str, fallback: list[FixSuggestion]
    ) -> list[FixSuggestion]:
        """Rank did-you-mean paths for *target*, or return *fallback*."""
        suggestions = fuzzy_path_suggestions(
            self._tree_root(), self._state.cwd, target, mode, self._config.fuzzy_path_limit
        )
        fixes = [
            FixSuggestion(command=f"{prefix}{s.insert_text}", label=f"{prefix}{s.label}")
            for s in suggestions
        ]
        return fixes or fallback

    def _navigate(self, path: str) -> None:
        """Move to *path* and notify the address collaborator."""
        self._state.set_cwd(path)
        self._on_navigate(path)
        self._logger.log(LogLevel.INFO, f"Changed directory to {path}", source="shell")

    # -- Command handlers ----------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> None:
        """Start onboarding the first time, then show the command grid."""
        if self._onboarding.should_start():
            self._output(self._onboarding.start())
            self._logger.log(LogLevel.INFO, "Onboarding started", source="onboarding")
            return
        self._output(HELP_GRID)

    def _cmd_summary(self, _args: list[str]) -> None:
        """Show the quick-start sheet."""
        self._output(SUMMARY_TEXT)

    def _cmd_clear(self, _args: list[str]) -> None:
        """Clear the display log, keeping the banner."""
        self._state.clear_entries()
        self._cleared = True

    def _cmd_pwd(self, _args: list[str]) -> None:
        """Print the working directory."""
        self._output(self._state.cwd)

    def _cmd_history(self, _args: list[str]) -> None:
        """Show the numbered command history."""
        self._output("\n".join(f"  {i}  {cmd}" for i, cmd in enumerate(self._state.commands, 1)))

    def _cmd_home(self, _args: list[str]) -> None:
        """Jump to the root, recording a history step."""
        self._navigate(ROOT_PATH)

    def _cmd_back(self, _args: list[str]) -> None:
        """Return to the previous directory."""
        if not self._state.go_back():
            self._output(BACK_AT_FLOOR_TEXT)
            return
        self._on_navigate(self._state.cwd)
        self._logger.log(LogLevel.INFO, f"Went back to {self._state.cwd}", source="shell")

    def _cmd_cd(self, args: list[str]) -> None:
        """Change the working directory (``/`` when no target is given)."""
        target = args[0] if args else ROOT_PATH
        found = self._lookup(target)
        if found is None:
            fixes = self._path_fixes(
                target, PathMode.DIRECTORY, "cd ", [FixSuggestion.of("ls"), FixSuggestion.of("pwd")]
            )
            msg = f"cd: no such file or directory: {target}"
            raise PathNotFoundError(msg, fixes)

        path, node = found
        match node:
            case FileNode():
                msg = f"cd: not a directory: {target}"
                raise NotADirectoryShellError(
                    msg, [FixSuggestion.of(f"open {target}"), FixSuggestion.of(f"cat {target}")]
                )
            case DirectoryNode():
                self._navigate(path)

    def _cmd_ls(self, args: list[str]) -> None:
        """List a directory (the working directory by default), directories first."""
        target = args[0] if args else self._state.cwd
        found = self._lookup(target)
        if found is None:
            fixes = self._path_fixes(target, PathMode.EITHER, "ls ", [FixSuggestion.of("ls")])
            msg = f"ls: no such file or directory: {target}"
            raise PathNotFoundError(msg, fixes)

        path, node = found
        match node:
            case FileNode():
                msg = f"ls: not a directory: {path}"
                raise NotADirectoryShellError(msg, [FixSuggestion.of(f"cat {target}")])
            case DirectoryNode():
                names = [
                    f"{name}/" if isinstance(child, DirectoryNode) else name
                    for name, child in sorted_children(node)
                ]
                self._output("  ".join(names))

    def _cmd_open(self, args: list[str]) -> None:
        """Step into a directory or read a file."""
        self._has_used_open = True
        if not args:
            raise MissingArgumentError(
                "Usage: open <path>",
                [
                    FixSuggestion(command="open ", label="open <path>"),
                    FixSuggestion.of("ls"),
                    FixSuggestion.of("tree"),
                ],
            )

        target = args[0]
        found = self._lookup(target)
        if found is None:
            fixes = self._path_fixes(
                target, PathMode.EITHER, "open ", [FixSuggestion.of("ls"), FixSuggestion.of("tree")]
            )
            msg = f"open: {target}: No such file or directory"
            raise PathNotFoundError(msg, fixes)

        path, node = found
        match node:
            case DirectoryNode():
                self._navigate(path)
                self._on_highlight(HighlightEvent(path, self._last_opened_file))
            case FileNode(slug=slug, content=content):
                self._output(content or EMPTY_FILE_TEXT)
                self._on_navigate(f"/{slug}")
                self._last_opened_file = path
                self._on_highlight(HighlightEvent(parent_path(path), path))
                self._logger.log(LogLevel.INFO, f"Opened {path}", source="fs")

    def _cmd_cat(self, args: list[str]) -> None:
        """Print a file without changing location."""
        if not args:
            raise MissingArgumentError(
                "Usage: cat <filename>",
                [
                    FixSuggestion(command="cat ", label="cat <filename>"),
                    FixSuggestion.of("ls"),
                    FixSuggestion(command="open ", label="open <path>"),
                ],
            )

        target = args[0]
        found = self._lookup(target)
        if found is None:
            fixes = self._path_fixes(
                target,
                PathMode.FILE,
                "cat ",
                [FixSuggestion.of("ls"), FixSuggestion(command="open ", label="open <path>")],
            )
            msg = f"cat: {target}: No such file"
            raise PathNotFoundError(msg, fixes)

        path, node = found
        match node:
            case DirectoryNode():
                msg = f"cat: {target}: Is a directory"
                raise IsADirectoryShellError(
                    msg, [FixSuggestion.of(f"ls {target}"), FixSuggestion.of(f"open {target}")]
                )
            case FileNode(content=content):
                self._output(content or EMPTY_FILE_TEXT)
                self._logger.log(LogLevel.INFO, f"Read {path}", source="fs")

    def _cmd_search(self, args: list[str]) -> None:
        """Find nodes whose name, title, or tags contain a term."""
        term = " ".join(args).lower()
        if not term:
            raise MissingArgumentError(
                "Usage: search <term>",
                [
                    FixSuggestion(command="search ", label="search <term>"),
                    FixSuggestion.of("summary"),
                    FixSuggestion.of("help"),
                ],
            )

        results: list[str] = []

        def matches(name: str, meta: NodeMeta | None) -> bool:
            if term in name.lower():
                return True
            if meta is None:
                return False
            if meta.title and term in meta.title.lower():
                return True
            return any(term in tag.lower() for tag in meta.tags)

        def walk(node: FilesystemNode, path: str) -> None:
            match node:
                case FileNode(name=name, meta=meta):
                    if matches(name, meta):
                        results.append(f"[FILE] {meta.title or name}  {path}")
                case DirectoryNode(name=name, meta=meta):
                    if name and matches(name, meta):
                        results.append(f"[DIR] {node.title or name}  {path}")
                    for child_name, child in sorted_children(node):
                        walk(child, join_path(path, child_name))

        walk(self._tree_root(), ROOT_PATH)
        self._output("\n".join(results) if results else f'No results for "{term}"')

    def _cmd_tree(self, args: list[str]) -> None:
        """Draw the structure below a path.

        Accepted forms::

            tree                 tree <path>
            tree -L <n> [path]   tree <n> [path]   tree <path> <n>
        """
        max_depth = self._config.tree_depth
        depth_explicit = False
        target: str | None = None

        if args and args[0] in _DEPTH_FLAGS:
            parsed = parse_depth(args[1] if len(args) > 1 else None)
            if parsed is None:
                raise MissingArgumentError(
                    "Usage: tree [-L depth] [path]",
                    [FixSuggestion.of("tree"), FixSuggestion.of(f"tree -L {self._config.tree_depth}")],
                )
            max_depth, depth_explicit = parsed, True
            target = args[2] if len(args) > 2 else None  # noqa: PLR2004
        elif len(args) == 1:
            parsed = parse_depth(args[0])
            if parsed is None:
                target = args[0]
            else:
                max_depth, depth_explicit = parsed, True
        elif len(args) >= 2:  # noqa: PLR2004
            first = parse_depth(args[0])
            if first is not None:
                max_depth, depth_explicit = first, True
                target = args[1]
            else:
                target = args[0]
                second = parse_depth(args[1])
                if second is not None:
                    max_depth, depth_explicit = second, True

        if target is None:
            path = self._state.cwd
            node = get_node_at_path(self._tree_root(), path)
        else:
            found = self._lookup(target)
            path, node = found if found is not None else (target, None)

        if node is None:
            prefix = f"tree -L {max_depth} " if depth_explicit else "tree "
            fallback = [FixSuggestion.of("tree"), FixSuggestion.of("ls")]
            fixes = (
                self._path_fixes(target, PathMode.EITHER, prefix, fallback)
                if target is not None
                else fallback
            )
            msg = f"tree: no such file or directory: {target if target is not None else path}"
            raise PathNotFoundError(msg, fixes)

        self._output(render_tree(node, basename(path), max_depth))

