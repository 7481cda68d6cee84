"""Content tree loading — build the immutable library from JSON.

The shell never parses source documents.  Something outside it builds
the tree once and hands over the root.  This module is that something
for the Python tools: it reads a JSON document shaped like the tree
itself and constructs frozen nodes from it.

    - ``library_from_dict(data)`` — build from an already-decoded dict.
    - ``load_library(path)`` — read a JSON file, then build.
    - ``sample_library()`` — the bundled library used by default.

JSON shape::

    {"type": "dir", "name": "", "meta": {"title": "..."},
     "children": {
         "about": {"type": "file", "slug": "about",
                   "meta": {"title": "About Me"}, "content": "..."}}}
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from py_shelf.fs.nodes import DirectoryNode, FileNode, FilesystemNode, NodeMeta, NodeType

if TYPE_CHECKING:
    from pathlib import Path


class LibraryLoadError(RuntimeError):
    """Raise when the content tree document cannot be loaded.

    Examples: missing file, invalid JSON, unknown node type.
    """


def _expect_dict(value: object, where: str) -> dict[str, Any]:
    """Return *value* if it is a JSON object, else raise."""
    if not isinstance(value, dict):
        msg = f"Expected an object at {where}, got {type(value).__name__}"
        raise LibraryLoadError(msg)
    return value  # pyright: ignore[reportUnknownVariableType]


def _optional_str(data: dict[str, Any], key: str, where: str) -> str | None:
    """Return ``data[key]`` if it is a string or absent, else raise."""
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        msg = f"Field {key!r} at {where} must be a string, got {type(value).__name__}"
        raise LibraryLoadError(msg)
    return value


def _meta_from_dict(raw: object, where: str) -> NodeMeta | None:
    """Build metadata from its JSON form."""
    if raw is None:
        return None
    data = _expect_dict(raw, f"{where} meta")
    tags = data.get("tags") or []
    if not isinstance(tags, list):
        msg = f"Tags must be a list, got {type(tags).__name__}"
        raise LibraryLoadError(msg)
    return NodeMeta(
        title=_optional_str(data, "title", where),
        tags=tuple(str(tag) for tag in tags),  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]
        date=_optional_str(data, "date", where),
        description=_optional_str(data, "description", where),
    )


def _node_from_dict(name: str, raw: object) -> FilesystemNode:
    """Recursively build a node (and its subtree) from its JSON form."""
    where = repr(name)
    data = _expect_dict(raw, where)
    raw_type = data.get("type", NodeType.DIRECTORY)
    try:
        node_type = NodeType(raw_type) if isinstance(raw_type, str) else None
    except ValueError:
        node_type = None
    if node_type is None:
        msg = f"Unknown node type {raw_type!r} at {where}"
        raise LibraryLoadError(msg)

    match node_type:
        case NodeType.FILE:
            return FileNode(
                name=name,
                slug=_optional_str(data, "slug", where) or name,
                meta=_meta_from_dict(data.get("meta"), where) or NodeMeta(title=name),
                content=_optional_str(data, "content", where) or "",
            )
        case NodeType.DIRECTORY:
            raw_children = _expect_dict(data.get("children") or {}, f"{where} children")
            children = {
                child_name: _node_from_dict(child_name, child)
                for child_name, child in raw_children.items()
            }
            return DirectoryNode(
                name=name, children=children, meta=_meta_from_dict(data.get("meta"), where)
            )


def library_from_dict(data: object) -> DirectoryNode:
    """Build a content tree from a decoded JSON document.

    Args:
        data: The root directory in JSON form.

    Returns:
        The root directory node.

    Raises:
        LibraryLoadError: If the document is malformed or its root is
            not a directory.

    """
    document = _expect_dict(data, "the library root")
    name = _optional_str(document, "name", "the library root") or ""
    root = _node_from_dict(name, document)
    if not isinstance(root, DirectoryNode):
        msg = "The library root must be a directory"
        raise LibraryLoadError(msg)
    return root


def load_library(path: Path) -> DirectoryNode:
    """Load a content tree from a JSON file.

    Raises:
        LibraryLoadError: If the file cannot be read or decoded.

    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load library: {e}"
        raise LibraryLoadError(msg) from e
    return library_from_dict(data)


_SAMPLE: dict[str, Any] = {
    "type": "dir",
    "name": "",
    "children": {
        "about": {
            "type": "file",
            "slug": "about",
            "meta": {"title": "About Me", "description": "Meta info"},
            "content": "# About Me\n\nThis is my digital garden.",
        },
        "books": {
            "type": "dir",
            "meta": {"title": "Book Collection"},
            "children": {
                "sicp": {
                    "type": "dir",
                    "meta": {
                        "title": "Structure and Interpretation of Computer Programs",
                        "tags": ["programming", "lisp"],
                    },
                    "children": {
                        "chapter-1": {
                            "type": "file",
                            "slug": "sicp/chapter-1",
                            "meta": {
                                "title": "Building Abstractions with Procedures",
                                "tags": ["recursion", "lisp"],
                                "date": "2025-03-02",
                            },
                            "content": "Procedures are the atoms of the language.",
                        },
                        "chapter-2": {
                            "type": "file",
                            "slug": "sicp/chapter-2",
                            "meta": {
                                "title": "Building Abstractions with Data",
                                "tags": ["data"],
                                "date": "2025-04-11",
                            },
                            "content": "Data is just procedures in disguise.",
                        },
                    },
                },
                "meditations": {
                    "type": "dir",
                    "meta": {"title": "Meditations", "tags": ["stoicism", "philosophy"]},
                    "children": {
                        "book-two": {
                            "type": "file",
                            "slug": "meditations/book-two",
                            "meta": {"title": "Book Two", "tags": ["stoicism"]},
                            "content": "Begin the morning by saying to thyself...",
                        },
                    },
                },
            },
        },
        "dune": {
            "type": "dir",
            "meta": {"title": "Dune", "tags": ["fiction", "ecology"], "date": "2025-01-05"},
            "children": {
                "analysis": {
                    "type": "file",
                    "slug": "dune/analysis",
                    "meta": {"title": "On Fear and Control", "tags": ["fiction", "power"]},
                    "content": "Fear is the mind-killer.",
                },
                "chapter-1": {
                    "type": "file",
                    "slug": "dune/chapter-1",
                    "meta": {"title": "Arrakis", "tags": ["ecology"]},
                    "content": "",
                },
            },
        },
    },
}


def sample_library() -> DirectoryNode:
    """Return the bundled sample library."""
    return library_from_dict(_SAMPLE)
