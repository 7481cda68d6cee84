"""Path resolution and node lookup over the content tree.

Paths are resolved in two separate steps, the way a shell does it:

1. **Resolve** — turn a path expression (absolute, ``~``, or relative
   to the working directory) into a canonical absolute path.  ``.`` is
   skipped and ``..`` pops one segment, clamping at the root.  Every
   segment must name a child of a directory; otherwise the path does
   not exist.
2. **Lookup** — walk from the root to the node at a canonical path.

The resolver does not care whether the final node is a file or a
directory; that is the caller's decision (``cd`` wants a directory,
``cat`` wants a file, ``open`` takes either).
"""

from __future__ import annotations

from py_shelf.errors import PathNotFoundError
from py_shelf.fs.nodes import DirectoryNode, FileNode, FilesystemNode

ROOT_PATH = "/"
HOME_ALIAS = "~"


def split_segments(path: str) -> list[str]:
    """Split a path on ``/`` and drop empty segments."""
    return [part for part in path.split("/") if part]


def resolve_path(root: DirectoryNode, current: str, target: str) -> str:
    """Resolve *target* against *current* into a canonical absolute path.

    Args:
        root: The root directory of the content tree.
        current: The canonical working directory.
        target: The path expression typed by the visitor.

    Returns:
        The canonical absolute path (``/`` for the root).

    Raises:
        PathNotFoundError: If a segment does not name a child of a
            directory.

    """
    if target in (ROOT_PATH, HOME_ALIAS):
        return ROOT_PATH

    parts = (
        split_segments(target)
        if target.startswith("/")
        else split_segments(current) + split_segments(target)
    )

    stack: list[str] = []
    for part in parts:
        if part == ".":
            continue
        if part == "..":
            if stack:
                stack.pop()
            continue
        stack.append(part)

    cursor: FilesystemNode = root
    for part in stack:
        match cursor:
            case DirectoryNode(children=children) if part in children:
                cursor = children[part]
            case DirectoryNode() | FileNode():
                msg = f"No such file or directory: {target}"
                raise PathNotFoundError(msg)

    return ROOT_PATH + "/".join(stack)


def get_node_at_path(root: DirectoryNode, path: str) -> FilesystemNode | None:
    """Return the node at a canonical *path*, or None if it is missing."""
    if path in (ROOT_PATH, ""):
        return root

    cursor: FilesystemNode = root
    for part in split_segments(path):
        match cursor:
            case DirectoryNode(children=children) if part in children:
                cursor = children[part]
            case DirectoryNode() | FileNode():
                return None
    return cursor


def sorted_children(directory: DirectoryNode) -> list[tuple[str, FilesystemNode]]:
    """Return children with directories first, then by name."""
    return sorted(
        directory.children.items(),
        key=lambda item: (not isinstance(item[1], DirectoryNode), item[0]),
    )


def parent_path(path: str) -> str:
    """Return the canonical parent of *path* (the root is its own parent)."""
    parts = split_segments(path)
    if not parts:
        return ROOT_PATH
    return ROOT_PATH + "/".join(parts[:-1])


def basename(path: str) -> str:
    """Return the last segment of *path*, or ``/`` for the root."""
    parts = split_segments(path)
    return parts[-1] if parts else ROOT_PATH


def join_path(directory: str, name: str) -> str:
    """Join a canonical directory path and a child name."""
    return f"{directory.rstrip('/')}/{name}"
