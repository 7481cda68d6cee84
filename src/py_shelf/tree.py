"""Tree renderer — draw a subtree with box-drawing connectors.

Example for ``tree -L 2`` at the root::

    /
    ├── books/ — Book Collection
    │   ├── meditations/ — Meditations
    │   └── sicp/ — Structure and Interpretation of Computer Programs
    ├── dune/ — Dune
    │   ├── analysis — On Fear and Control
    │   └── chapter-1 — Arrakis
    └── about — About Me

The depth bound is inclusive: a directory sitting exactly at
``max_depth`` is printed but its children are not.
"""

from __future__ import annotations

import math

from py_shelf.fs.nodes import DirectoryNode, FileNode, FilesystemNode, display_title
from py_shelf.fs.paths import ROOT_PATH, sorted_children

DEFAULT_TREE_DEPTH = 4

_BRANCH = "├── "
_LAST_BRANCH = "└── "
_PIPE = "│   "
_SPACE = "    "


def parse_depth(value: str | None) -> int | None:
    """Parse a depth argument.

    Finite numbers are floored and negatives clamp to zero.

    Returns:
        The depth, or None if *value* is not a number.

    """
    if not value:
        return None
    try:
        depth = float(value)
    except ValueError:
        return None
    if not math.isfinite(depth):
        return None
    return max(0, math.floor(depth))


def _label(node: FilesystemNode, name: str) -> str:
    """Return the display label for one line of the tree."""
    match node:
        case DirectoryNode():
            base = name if name == ROOT_PATH else f"{name}/"
        case FileNode():
            base = name
    title = display_title(node, name)
    return f"{base} — {title}" if title else base


def render_tree(node: FilesystemNode, display_name: str, max_depth: int) -> str:
    """Render *node* and its descendants down to *max_depth*.

    Args:
        node: The subtree root.
        display_name: The name printed on the first line.
        max_depth: How many levels below *node* to expand.

    Returns:
        The rendered tree, one node per line.

    """
    lines: list[str] = []

    def walk(current: FilesystemNode, name: str, prefix: str, is_last: bool, depth: int) -> None:
        connector = "" if depth == 0 else _LAST_BRANCH if is_last else _BRANCH
        lines.append(prefix + connector + _label(current, name))

        match current:
            case FileNode():
                return
            case DirectoryNode():
                if depth >= max_depth:
                    return
                child_prefix = "" if depth == 0 else prefix + (_SPACE if is_last else _PIPE)
                entries = sorted_children(current)
                for index, (child_name, child) in enumerate(entries):
                    walk(child, child_name, child_prefix, index == len(entries) - 1, depth + 1)

    walk(node, display_name, "", True, 0)
    return "\n".join(lines)
