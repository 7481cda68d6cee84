"""Command-line tokenizer — raw input into a command and its arguments.

The rules follow a small subset of POSIX shell quoting:

- Unquoted whitespace separates tokens.
- ``'...'`` and ``"..."`` group characters, whitespace included.  Quotes
  must be closed; an open quote at the end of input is the only parse
  failure.
- A backslash makes the next character literal, inside or outside
  quotes.

The first token is lowercased and mapped through ``ALIASES`` to the
canonical command name.  The remaining tokens keep their case.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from py_shelf.errors import ParseError

ALIASES: dict[str, str] = {
    "?": "help",
    "dir": "ls",
    "goto": "cd",
    "read": "cat",
    "tldr": "summary",
}

_QUOTES = frozenset("\"'")


@dataclass(frozen=True)
class ParsedCommand:
    """A tokenized command line.

    Attributes:
        raw: The original input.
        name: The canonical command name (after alias expansion).
        args: The remaining tokens.

    """

    raw: str
    name: str
    args: list[str] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]


def canonical_name(token: str) -> str:
    """Lowercase *token* and expand it through the alias table."""
    lowered = token.lower()
    return ALIASES.get(lowered, lowered)


def tokenize(line: str) -> list[str]:
    """Split *line* into tokens.

    Raises:
        ParseError: If a quote is left open.

    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escaping = False

    for char in line:
        if escaping:
            current.append(char)
            escaping = False
        elif char == "\\":
            escaping = True
        elif quote is not None:
            if char == quote:
                quote = None
            else:
                current.append(char)
        elif char in _QUOTES:
            quote = char
        elif char.isspace():
            if current:
                tokens.append("".join(current))
            current = []
        else:
            current.append(char)

    if quote is not None:
        msg = "Unclosed quote found."
        raise ParseError(msg)

    if current:
        tokens.append("".join(current))
    return tokens


def parse_command(line: str) -> ParsedCommand | None:
    """Parse a raw input line.

    Args:
        line: The text the visitor submitted.

    Returns:
        The parsed command, or None for blank input.

    Raises:
        ParseError: If a quote is left open.

    """
    if not line.strip():
        return None

    tokens = tokenize(line)
    if not tokens:
        return None

    return ParsedCommand(raw=line, name=canonical_name(tokens[0]), args=tokens[1:])
