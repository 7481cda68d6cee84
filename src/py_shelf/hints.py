"""Try chips — a few runnable suggestions shown under an empty prompt.

New visitors often stare at a blank prompt.  Until they first use
``open``, the shell offers a handful of commands to try: one ``open``
of something near the current directory, one ``search`` for a term
that actually appears in the library, and a couple of basics.

Randomness comes from an injected ``random.Random`` so callers (and
tests) can make the picks reproducible.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from py_shelf.fs.nodes import DirectoryNode, FileNode, FilesystemNode
from py_shelf.fs.paths import get_node_at_path, sorted_children

_MAX_WALK_DEPTH = 3
_MAX_WALK_ITEMS = 80
_MAX_SEARCH_TERMS = 80
_MIN_TERM_LENGTH = 3
_MAX_PICK_ATTEMPTS = 50
_EXCLUDED_NAMES = frozenset({"about"})
_BASE_POOL = ("ls", "tree", "summary", "help", "home")


@dataclass(frozen=True)
class TryChip:
    """A suggested command for the visitor to try."""

    command: str
    label: str


def collect_relative_paths(
    directory: DirectoryNode,
    *,
    max_depth: int = _MAX_WALK_DEPTH,
    max_items: int = _MAX_WALK_ITEMS,
    exclude: frozenset[str] = _EXCLUDED_NAMES,
) -> tuple[list[str], list[str]]:
    """Collect relative file and directory paths below *directory*.

    Returns:
        ``(files, dirs)`` in sorted traversal order.

    """
    files: list[str] = []
    dirs: list[str] = []

    def walk(node: DirectoryNode, prefix: str, depth: int) -> None:
        if depth > max_depth or len(files) + len(dirs) >= max_items:
            return
        for name, child in sorted_children(node):
            if name in exclude:
                continue
            match child:
                case DirectoryNode():
                    dirs.append(f"{prefix}{name}")
                    if depth < max_depth:
                        walk(child, f"{prefix}{name}/", depth + 1)
                case FileNode():
                    files.append(f"{prefix}{name}")
            if len(files) + len(dirs) >= max_items:
                return

    walk(directory, "", 0)
    return files, dirs


def collect_search_terms(root: DirectoryNode, max_terms: int = _MAX_SEARCH_TERMS) -> list[str]:
    """Collect single-word terms that ``search`` would find."""
    terms: dict[str, None] = {}

    def add(value: str | None) -> None:
        if not value:
            return
        term = value.strip()
        if len(term) < _MIN_TERM_LENGTH or any(char.isspace() for char in term):
            return
        terms[term.lower()] = None

    def walk(node: FilesystemNode) -> None:
        add(node.name)
        if node.title:
            add(node.title.split()[0])
        match node:
            case FileNode(meta=meta):
                for tag in meta.tags:
                    add(tag)
            case DirectoryNode(meta=meta, children=children):
                for tag in meta.tags if meta else ():
                    add(tag)
                for child in children.values():
                    walk(child)
                    if len(terms) >= max_terms:
                        return

    walk(root)
    return list(terms)


def build_try_chips(
    root: DirectoryNode, cwd: str, count: int = 3, rng: random.Random | None = None
) -> list[TryChip]:
    """Pick up to *count* distinct commands for the visitor to try.

    Args:
        root: The content tree.
        cwd: The current working directory.
        count: How many chips to return.
        rng: Source of randomness (a fresh ``Random`` if omitted).

    Returns:
        The chips, in display order.

    """
    rng = rng or random.Random()
    chips: list[TryChip] = []
    used: set[str] = set()

    def push(command: str | None) -> None:
        if command is None or command in used:
            return
        used.add(command)
        chips.append(TryChip(command=command, label=command))

    node = get_node_at_path(root, cwd)
    cwd_dir = node if isinstance(node, DirectoryNode) else root

    files, dirs = collect_relative_paths(cwd_dir)
    target = rng.choice(files) if files else rng.choice(dirs) if dirs else None
    push(f"open {target}" if target else None)

    terms = collect_search_terms(root)
    push(f"search {rng.choice(terms)}" if terms else None)

    attempts = 0
    while len(chips) < count and attempts < _MAX_PICK_ATTEMPTS:
        attempts += 1
        push(rng.choice(_BASE_POOL))

    return chips[:count]
