"""Tests for the shell module.

The shell is the command interpreter — it parses visitor input,
dispatches to built-in commands, records what happened in the session
display log, and returns the produced text.  It operates on an
immutable content tree (the bundled sample library in these tests).
"""

import random

import pytest

from py_shelf.config import ShellConfig
from py_shelf.errors import FixSuggestion
from py_shelf.fs.loader import sample_library
from py_shelf.logging import LogLevel
from py_shelf.onboarding import BEGINNER_TIPS, EXPERIENCE_QUESTION, GREETING, REPROMPT
from py_shelf.session import DEFAULT_BANNER, EntryKind
from py_shelf.shell import (
    BACK_AT_FLOOR_TEXT,
    EMPTY_FILE_TEXT,
    FS_UNAVAILABLE_TEXT,
    HELP_GRID,
    SUMMARY_TEXT,
    HighlightEvent,
    Shell,
)

SEED = 42


def _shell(**kwargs: object) -> Shell:
    """Create a shell over the sample library."""
    return Shell(root=sample_library(), rng=random.Random(SEED), **kwargs)  # type: ignore[arg-type]


def _skip_onboarding(shell: Shell) -> None:
    """Run the first ``help`` through to the end of the detour."""
    shell.execute("help")
    shell.execute("yes")
    shell.execute("yes")


def _last_fixes(shell: Shell) -> list[str]:
    """Return the fix commands on the most recent entry."""
    return [fix.command for fix in shell.state.entries[-1].fixes]


# -- Cycle 1: Creation and blank input -----------------------------------------


class TestShellCreation:
    """Verify shell initialisation."""

    def test_starts_at_root_with_banner(self) -> None:
        """A fresh shell sits at the root with one banner."""
        shell = _shell()
        assert shell.state.cwd == "/"
        assert shell.state.entries == [DEFAULT_BANNER]

    def test_configured_initial_cwd(self) -> None:
        """The configured start directory is honoured."""
        shell = _shell(config=ShellConfig(initial_cwd="/books"))
        assert shell.state.cwd == "/books"

    def test_bad_initial_cwd_raises(self) -> None:
        """A start directory missing from the tree is rejected."""
        with pytest.raises(ValueError, match="Initial directory not found"):
            _shell(config=ShellConfig(initial_cwd="/nowhere"))

    def test_file_initial_cwd_raises(self) -> None:
        """A start path that is a file is rejected."""
        with pytest.raises(ValueError, match="Initial directory not found"):
            _shell(config=ShellConfig(initial_cwd="/about"))

    def test_command_names(self) -> None:
        """Every command is registered."""
        assert "history" in _shell().command_names


class TestShellExecute:
    """Verify the submission pipeline."""

    def test_blank_line_is_ignored(self) -> None:
        """Blank input changes nothing."""
        shell = _shell()
        assert shell.execute("   ") == ""
        assert shell.state.commands == []
        assert len(shell.state.entries) == 1

    def test_command_is_echoed_and_recorded(self) -> None:
        """Each line is echoed with its directory and kept in history."""
        shell = _shell()
        shell.execute("pwd")
        echo = shell.state.entries[-2]
        assert echo.kind is EntryKind.COMMAND
        assert echo.text == "pwd"
        assert echo.path == "/"
        assert shell.state.commands == ["pwd"]

    def test_aliases_and_case(self) -> None:
        """Aliases and upper-case names dispatch normally."""
        shell = _shell()
        assert shell.execute("DIR") == shell.execute("ls")

    def test_parse_error(self) -> None:
        """An unclosed quote becomes an error entry."""
        shell = _shell()
        assert shell.execute('cat "about') == "Unclosed quote found."
        assert shell.state.entries[-1].kind is EntryKind.ERROR

    def test_filesystem_unavailable(self) -> None:
        """Without a tree every command reports the missing filesystem."""
        shell = Shell(root=None)
        assert shell.execute("ls") == FS_UNAVAILABLE_TEXT
        assert shell.try_chips() == []


# -- Cycle 2: Unknown commands --------------------------------------------------


class TestUnknownCommand:
    """Verify correction of mistyped commands."""

    def test_message_and_first_fix(self) -> None:
        """``lls -la`` suggests ``ls -la``."""
        shell = _shell()
        result = shell.execute("lls -la")
        assert result.startswith("Command 'lls' not found.")
        assert "Did you mean:" in result
        assert _last_fixes(shell)[0] == "ls -la"

    def test_fixes_capped(self) -> None:
        """No more than four fixes are offered."""
        shell = _shell()
        shell.execute("c")
        assert len(_last_fixes(shell)) <= 4  # noqa: PLR2004

    def test_configured_fix_limit(self) -> None:
        """The fix limit can be lowered by configuration."""
        shell = _shell(config=ShellConfig(fix_limit=1))
        shell.execute("c")
        assert len(_last_fixes(shell)) == 1

    def test_falls_back_to_help(self) -> None:
        """With no close command, ``help`` is the only fix."""
        shell = _shell()
        shell.execute("qqqqqqqqqq")
        assert _last_fixes(shell) == ["help"]

    def test_errors_are_logged(self) -> None:
        """Errors are recorded as warnings in the audit log."""
        shell = _shell()
        shell.execute("lls")
        warnings = shell.logger.filter(min_level=LogLevel.WARNING)
        assert warnings[-1].message == "Command 'lls' not found."


# -- Cycle 3: Navigation -------------------------------------------------------


class TestNavigation:
    """Verify cd, home, back and pwd."""

    def test_cd_and_pwd(self) -> None:
        """cd moves, ``..`` returns, pwd prints."""
        shell = _shell()
        shell.execute("cd books")
        assert shell.execute("pwd") == "/books"
        shell.execute("cd ..")
        assert shell.execute("pwd") == "/"

    def test_cd_without_args_goes_to_root(self) -> None:
        """A bare cd returns to the root."""
        shell = _shell()
        shell.execute("cd books/sicp")
        shell.execute("cd")
        assert shell.state.cwd == "/"

    def test_cd_missing_suggests_paths(self) -> None:
        """A typo in cd offers the closest directory."""
        shell = _shell()
        assert shell.execute("cd bokos").startswith("cd: no such file or directory: bokos")
        assert _last_fixes(shell)[0] == "cd books/"

    def test_cd_into_file(self) -> None:
        """cd on a file suggests reading it instead."""
        shell = _shell()
        assert shell.execute("cd about").startswith("cd: not a directory: about")
        assert _last_fixes(shell) == ["open about", "cat about"]
        assert shell.state.cwd == "/"

    def test_home(self) -> None:
        """home jumps to the root and can be undone with back."""
        shell = _shell()
        shell.execute("cd books/sicp")
        shell.execute("home")
        assert shell.state.cwd == "/"
        shell.execute("back")
        assert shell.state.cwd == "/books/sicp"

    def test_back_at_floor(self) -> None:
        """back with no history is a notice, not an error."""
        shell = _shell()
        assert shell.execute("back") == BACK_AT_FLOOR_TEXT
        assert shell.state.entries[-1].kind is EntryKind.OUTPUT

    def test_navigate_callback(self) -> None:
        """Moves are reported to the address collaborator."""
        visited: list[str] = []
        shell = _shell(on_navigate=visited.append)
        shell.execute("cd books")
        shell.execute("back")
        assert visited == ["/books", "/"]


# -- Cycle 4: Listing and reading ----------------------------------------------


class TestListing:
    """Verify ls."""

    def test_ls_root(self) -> None:
        """Directories come first with a trailing slash."""
        assert _shell().execute("ls") == "books/  dune/  about"

    def test_ls_path(self) -> None:
        """ls accepts a directory argument."""
        assert _shell().execute("ls books") == "meditations/  sicp/"

    def test_ls_file(self) -> None:
        """ls on a file suggests cat."""
        shell = _shell()
        assert shell.execute("ls about") == (
            "ls: not a directory: /about\nDid you mean: cat about  (type one to run)"
        )


class TestReading:
    """Verify cat and open."""

    def test_cat(self) -> None:
        """cat prints file content without moving."""
        shell = _shell()
        assert shell.execute("cat dune/analysis") == "Fear is the mind-killer."
        assert shell.state.cwd == "/"

    def test_cat_empty_file(self) -> None:
        """An empty file shows a placeholder."""
        assert _shell().execute("cat dune/chapter-1") == EMPTY_FILE_TEXT

    def test_cat_directory(self) -> None:
        """cat on a directory suggests listing or opening it."""
        shell = _shell()
        assert shell.execute("cat books").startswith("cat: books: Is a directory")
        assert _last_fixes(shell) == ["ls books", "open books"]

    def test_cat_missing_argument(self) -> None:
        """cat without a path shows usage."""
        shell = _shell()
        assert shell.execute("cat").startswith("Usage: cat <filename>")

    def test_open_directory_moves(self) -> None:
        """open on a directory moves into it and highlights it."""
        events: list[HighlightEvent] = []
        shell = _shell(on_highlight=events.append)
        shell.execute("open books")
        assert shell.state.cwd == "/books"
        assert events == [HighlightEvent("/books", None)]

    def test_open_file_reads_and_highlights(self) -> None:
        """open on a file prints it and reports its slug."""
        events: list[HighlightEvent] = []
        visited: list[str] = []
        shell = _shell(on_highlight=events.append, on_navigate=visited.append)
        assert shell.execute("open about").startswith("# About Me")
        assert shell.state.cwd == "/"
        assert visited == ["/about"]
        assert events == [HighlightEvent("/", "/about")]

    def test_open_remembers_last_file(self) -> None:
        """Opening a directory keeps the last file highlighted."""
        events: list[HighlightEvent] = []
        shell = _shell(on_highlight=events.append)
        shell.execute("open about")
        shell.execute("open dune")
        assert events[-1] == HighlightEvent("/dune", "/about")

    def test_open_missing(self) -> None:
        """A missing target is reported with fuzzy fixes."""
        shell = _shell()
        assert shell.execute("open dnue").startswith("open: dnue: No such file or directory")
        assert _last_fixes(shell)[0] == "open dune/"

    def test_open_stops_try_chips(self) -> None:
        """Try chips disappear once open has been used."""
        shell = _shell()
        assert shell.try_chips() != []
        shell.execute("open")
        assert shell.has_used_open
        assert shell.try_chips() == []


# -- Cycle 5: Search and tree --------------------------------------------------


class TestSearch:
    """Verify search over names, titles and tags."""

    def test_tag_match(self) -> None:
        """Tags find both directories and files."""
        result = _shell().execute("search stoic")
        assert result.splitlines() == [
            "[DIR] Meditations  /books/meditations",
            "[FILE] Book Two  /books/meditations/book-two",
        ]

    def test_title_match_case_insensitive(self) -> None:
        """Titles match regardless of case."""
        assert "[FILE] On Fear and Control  /dune/analysis" in _shell().execute("search FEAR")

    def test_no_results(self) -> None:
        """An unmatched term is reported."""
        assert _shell().execute("search zzz") == 'No results for "zzz"'

    def test_missing_term(self) -> None:
        """search without a term shows usage."""
        assert _shell().execute("search").startswith("Usage: search <term>")


class TestTree:
    """Verify tree argument forms."""

    def test_depth_flag(self) -> None:
        """``-L 0`` prints just the starting node."""
        assert _shell().execute("tree -L 0 books") == "books/ — Book Collection"

    def test_bare_depth(self) -> None:
        """A bare number is a depth for the working directory."""
        shell = _shell()
        shell.execute("cd books")
        assert shell.execute("tree 0") == "books/ — Book Collection"

    @pytest.mark.parametrize("line", ["tree -L 1 books", "tree 1 books", "tree books 1"])
    def test_depth_bound_is_inclusive(self, line: str) -> None:
        """Nodes at the bound are printed but not expanded."""
        result = _shell().execute(line)
        assert "meditations/" in result
        assert "sicp/" in result
        assert "book-two" not in result
        assert "chapter-1" not in result

    @pytest.mark.parametrize("line", ["tree -L 2 books", "tree 2 books", "tree books 2"])
    def test_one_more_level_expands(self, line: str) -> None:
        """Raising the bound by one reveals the next level."""
        result = _shell().execute(line)
        assert "book-two" in result
        assert "chapter-1" in result

    def test_path_then_depth(self) -> None:
        """A number after the path is the depth."""
        assert _shell().execute("tree books 1").splitlines()[1] == "├── meditations/ — Meditations"

    def test_missing_depth_value(self) -> None:
        """``-L`` without a number shows usage."""
        assert _shell().execute("tree -L").startswith("Usage: tree [-L depth] [path]")

    def test_missing_path_keeps_depth_in_fixes(self) -> None:
        """Fixes repeat the depth the visitor asked for."""
        shell = _shell()
        shell.execute("tree -L 1 bokos")
        assert _last_fixes(shell)[0] == "tree -L 1 books/"

    def test_default_depth(self) -> None:
        """Without a depth the configured default is used."""
        shell = _shell(config=ShellConfig(tree_depth=1))
        assert "book-two" not in shell.execute("tree")


# -- Cycle 6: Session commands and onboarding ----------------------------------


class TestSessionCommands:
    """Verify clear, history, summary."""

    def test_clear(self) -> None:
        """clear keeps only the banner."""
        shell = _shell()
        shell.execute("ls")
        assert shell.execute("clear") == ""
        assert shell.cleared
        assert shell.state.entries == [DEFAULT_BANNER]

    def test_history(self) -> None:
        """history lists submitted commands, numbered."""
        shell = _shell()
        shell.execute("ls")
        assert shell.execute("history") == "  1  ls\n  2  history"

    def test_summary(self) -> None:
        """summary prints the quick-start sheet."""
        assert _shell().execute("tldr") == SUMMARY_TEXT


class TestOnboarding:
    """Verify the first-help detour."""

    def test_first_help_greets(self) -> None:
        """The first help asks a question instead of listing commands."""
        assert _shell().execute("help") == GREETING

    def test_answers_are_not_commands(self) -> None:
        """While a question is pending, commands are answers."""
        shell = _shell()
        shell.execute("help")
        assert shell.execute("ls") == REPROMPT
        assert shell.try_chips() == []

    def test_beginner_flow(self) -> None:
        """Yes then no gives the beginner tips, then help shows the grid."""
        shell = _shell()
        shell.execute("help")
        assert shell.execute("y") == EXPERIENCE_QUESTION
        assert shell.execute("n") == BEGINNER_TIPS
        assert shell.execute("help") == HELP_GRID

    def test_declined_onboarding_is_not_repeated(self) -> None:
        """Saying no ends the detour for the rest of the session."""
        shell = _shell()
        shell.execute("help")
        shell.execute("no")
        assert shell.execute("help") == HELP_GRID

    def test_finished_onboarding_is_not_repeated(self) -> None:
        """After the detour help goes straight to the grid."""
        shell = _shell()
        _skip_onboarding(shell)
        assert shell.execute("?") == HELP_GRID


class TestFixSuggestionRendering:
    """Verify the entries store suggestions, not just text."""

    def test_fix_objects(self) -> None:
        """Fixes are stored as executable suggestions."""
        shell = _shell()
        shell.execute("cat books")
        assert shell.state.entries[-1].fixes[0] == FixSuggestion.of("ls books")
