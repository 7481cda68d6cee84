"""Tests for the autocomplete engine.

The Completer provides context-aware completion for the library shell.
Its logic is pure (no I/O) — it analyses the input line and returns
suggestions, making it fully testable without readline.
"""

from unittest.mock import patch

from py_shelf.completer import (
    COMMANDS,
    Completer,
    CompletionMode,
    PathMode,
    SuggestionKind,
    command_suggestions,
    fuzzy_path_suggestions,
    path_mode_for,
    path_suggestions,
)
from py_shelf.fs.loader import sample_library
from py_shelf.shell import Shell

ROOT = sample_library()


def _completer() -> tuple[Shell, Completer]:
    """Create a shell over the sample library and its completer."""
    shell = Shell(root=sample_library())
    return shell, Completer(shell)


# ---------------------------------------------------------------------------
# Cycle 1 — command position
# ---------------------------------------------------------------------------


class TestCommandCompletion:
    """Verify completion of the first word."""

    def test_prefix(self) -> None:
        """Only commands starting with the prefix are offered."""
        names = [s.insert_text for s in command_suggestions("c")]
        assert names == ["cd", "cat", "clear"]

    def test_prefix_is_case_insensitive(self) -> None:
        """Upper-case input still matches."""
        assert [s.insert_text for s in command_suggestions("TR")] == ["tree"]

    def test_no_fuzzy_in_command_position(self) -> None:
        """A typo gets no suggestions while typing."""
        assert command_suggestions("lls") == []

    def test_empty_prefix_lists_everything(self) -> None:
        """An empty prefix lists the whole vocabulary."""
        assert len(command_suggestions("")) == len(COMMANDS)

    def test_ghost_suffix(self) -> None:
        """The ghost text is the untyped rest of the top command."""
        _shell, completer = _completer()
        completion = completer.complete("hi")
        assert completion.mode is CompletionMode.COMMAND
        assert completion.ghost_suffix == "story"

    def test_blank_line(self) -> None:
        """A blank line has nothing to complete."""
        _shell, completer = _completer()
        assert completer.complete("   ").suggestions == []


# ---------------------------------------------------------------------------
# Cycle 2 — path position
# ---------------------------------------------------------------------------


class TestPathModes:
    """Verify which commands take paths."""

    def test_modes(self) -> None:
        """Each path command declares its kind."""
        assert path_mode_for("cd") is PathMode.DIRECTORY
        assert path_mode_for("cat") is PathMode.FILE
        assert path_mode_for("open") is PathMode.EITHER
        assert path_mode_for("tree") is PathMode.EITHER
        assert path_mode_for("search") is PathMode.NONE

    def test_aliases_share_modes(self) -> None:
        """Aliases complete like their commands."""
        assert path_mode_for("goto") is PathMode.DIRECTORY
        assert path_mode_for("read") is PathMode.FILE


class TestPathSuggestions:
    """Verify path completion."""

    def test_directory_mode_hides_files(self) -> None:
        """``cd`` never offers files."""
        suggestions = path_suggestions(ROOT, "/", "", PathMode.DIRECTORY)
        assert [s.insert_text for s in suggestions] == ["books/", "dune/"]

    def test_file_mode_hides_directories(self) -> None:
        """``cat`` never offers directories."""
        suggestions = path_suggestions(ROOT, "/", "", PathMode.FILE)
        assert [s.insert_text for s in suggestions] == ["about"]

    def test_nested_prefix(self) -> None:
        """The directory part is kept and the base is filtered."""
        suggestions = path_suggestions(ROOT, "/", "books/m", PathMode.EITHER)
        assert [s.insert_text for s in suggestions] == ["books/meditations/"]
        assert suggestions[0].kind is SuggestionKind.DIRECTORY

    def test_labels_carry_titles(self) -> None:
        """Labels show the title when it differs from the name."""
        suggestions = path_suggestions(ROOT, "/dune", "an", PathMode.FILE)
        assert suggestions[0].label == "analysis — On Fear and Control"

    def test_absolute_token(self) -> None:
        """A leading slash lists the root whatever the cwd."""
        suggestions = path_suggestions(ROOT, "/books/sicp", "/d", PathMode.EITHER)
        assert [s.insert_text for s in suggestions] == ["/dune/"]

    def test_unresolvable_directory(self) -> None:
        """A bad directory part yields nothing."""
        assert path_suggestions(ROOT, "/", "nope/x", PathMode.EITHER) == []

    def test_fuzzy_ranks_typos(self) -> None:
        """The did-you-mean listing forgives a transposition."""
        suggestions = fuzzy_path_suggestions(ROOT, "/", "bokos", PathMode.DIRECTORY)
        assert suggestions[0].insert_text == "books/"


# ---------------------------------------------------------------------------
# Cycle 3 — accepting a suggestion
# ---------------------------------------------------------------------------


class TestAccept:
    """Verify the Tab key."""

    def test_command_gets_space(self) -> None:
        """Accepting a command appends a space."""
        _shell, completer = _completer()
        assert completer.accept("tr") == "tree "

    def test_directory_gets_no_space(self) -> None:
        """Accepting a directory leaves the cursor after the slash."""
        _shell, completer = _completer()
        assert completer.accept("cd bo") == "cd books/"

    def test_file_gets_space(self) -> None:
        """Accepting a file appends a space."""
        _shell, completer = _completer()
        assert completer.accept("cat ab") == "cat about "

    def test_quote_is_preserved(self) -> None:
        """An opening quote stays in front of the completed token."""
        _shell, completer = _completer()
        assert completer.accept('cd "du') == 'cd "dune/'

    def test_nothing_to_accept(self) -> None:
        """No suggestions means no change."""
        _shell, completer = _completer()
        assert completer.accept("search x") is None

    def test_relative_to_cwd(self) -> None:
        """Completion follows the shell's working directory."""
        shell, completer = _completer()
        shell.execute("cd books")
        assert completer.accept("open si") == "open sicp/"


# ---------------------------------------------------------------------------
# Cycle 4 — onboarding and readline
# ---------------------------------------------------------------------------


class TestCompleterContext:
    """Verify completion is tied to the shell state."""

    def test_silent_during_onboarding(self) -> None:
        """No suggestions while an onboarding question is pending."""
        shell, completer = _completer()
        shell.execute("help")
        assert completer.complete("cd bo").suggestions == []

    def test_no_tree(self) -> None:
        """Without a tree, path positions have nothing to offer."""
        completer = Completer(Shell(root=None))
        assert completer.complete("cd b").suggestions == []

    def test_readline_complete(self) -> None:
        """The readline callback iterates candidates by state."""
        _shell, completer = _completer()
        with patch("py_shelf.completer.readline.get_line_buffer", return_value="c"):
            assert completer.readline_complete("c", 0) == "cd"
            assert completer.readline_complete("c", 1) == "cat"
            assert completer.readline_complete("c", 3) is None

    def test_accept_is_logged(self) -> None:
        """Accepted completions leave a DEBUG entry."""
        shell, completer = _completer()
        completer.accept("cd bo")
        entries = shell.logger.filter(source="completer")
        assert entries[-1].message == "Completed 'cd bo' to 'cd books/'"

    def test_preview_is_not_logged(self) -> None:
        """Previewing shows the accepted line without logging it."""
        shell, completer = _completer()
        assert completer.preview("cd bo") == "cd books/"
        assert shell.logger.filter(source="completer") == []
