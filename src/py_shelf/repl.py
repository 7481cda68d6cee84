"""Interactive REPL (Read-Eval-Print Loop) for the library shell.

The REPL is the terminal interface.  It loads the configuration and
content tree, creates a shell, and enters the classic loop:

    1. **Read** — display a prompt and read a line.
    2. **Eval** — pass it to ``shell.execute()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until end of input.

The shell is fully testable (returns strings, no I/O); the REPL is the
thin I/O wrapper around it.  The helper functions (``build_prompt``,
``format_banner``, ``load_root``) are pure and testable.  ``run()`` is
the I/O entrypoint.
"""

from __future__ import annotations

import argparse
import dataclasses
import readline
from pathlib import Path

from py_shelf.completer import Completer
from py_shelf.config import ConfigError, ShellConfig, load_config
from py_shelf.fs.loader import LibraryLoadError, load_library, sample_library
from py_shelf.fs.nodes import DirectoryNode
from py_shelf.session import EntryKind
from py_shelf.shell import Shell

_CLEAR_SCREEN = "\033[H\033[2J"


def build_prompt(shell: Shell) -> str:
    """Build the prompt string showing the working directory.

    Returns:
        A prompt like ``shelf:~/books $ ``.

    """
    return f"{shell.config.prompt_host}:~{shell.state.cwd} $ "


def format_banner(shell: Shell) -> str:
    """Return the banner entries of the session as one string."""
    return "\n".join(e.render() for e in shell.state.entries if e.kind is EntryKind.BANNER)


def format_chips(shell: Shell) -> str:
    """Return the try-chip line, or an empty string when there are none."""
    chips = shell.try_chips()
    if not chips:
        return ""
    return "Try: " + " · ".join(chip.label for chip in chips)


def load_root(config: ShellConfig) -> DirectoryNode | None:
    """Load the configured content tree, or the sample library.

    Returns:
        The tree, or None if the configured file cannot be loaded (the
        shell then reports the filesystem as unavailable).

    """
    if config.library_path is None:
        return sample_library()
    try:
        return load_library(config.library_path)
    except LibraryLoadError as e:
        print(f"warning: {e}")  # noqa: T201
        return None


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    """Parse command-line options."""
    parser = argparse.ArgumentParser(prog="py-shelf", description="Browse a library like a shell.")
    parser.add_argument("--config", type=Path, default=None, help="JSON configuration file")
    parser.add_argument("--library", type=Path, default=None, help="JSON content tree")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> None:
    """Load the library and run the interactive REPL.

    This is the ``py-shelf`` console entry point.  It handles:
    - Configuration and content loading.
    - Readline tab completion.
    - The read-eval-print loop.
    - Graceful handling of Ctrl+C and Ctrl+D.
    """
    args = _parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as e:
        raise SystemExit(str(e)) from e
    if args.library is not None:
        config = dataclasses.replace(config, library_path=args.library)

    shell = Shell(root=load_root(config), config=config)

    # Wire up tab completion via readline.
    completer = Completer(shell)
    readline.set_completer(completer.readline_complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    print(format_banner(shell))  # noqa: T201

    try:
        while True:
            chips = format_chips(shell)
            if chips:
                print(chips)  # noqa: T201
            try:
                line = input(build_prompt(shell))
            except EOFError:
                # Ctrl+D — graceful exit
                print()  # noqa: T201
                break

            result = shell.execute(line)
            if shell.cleared:
                print(_CLEAR_SCREEN + format_banner(shell))  # noqa: T201
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        # Ctrl+C — graceful exit
        print("\nInterrupted.")  # noqa: T201

    finally:
        print("Goodbye.")  # noqa: T201
