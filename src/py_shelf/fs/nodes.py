"""Content tree nodes — an immutable, read-only filesystem.

The library is modelled as a tree of two node kinds:

- **DirectoryNode** — a name, a mapping of child names to nodes, and
  optional metadata (title, tags, date).
- **FileNode** — a name, the content slug used for addressing, metadata,
  and the text of the note.

Both are frozen dataclasses tagged with a ``NodeType``.  Traversal code
matches on the concrete class so that every site handles both kinds
explicitly instead of assuming a directory.

Children are stored behind ``MappingProxyType`` so the tree cannot be
mutated after construction, which makes it safe to share between
sessions without locking.
"""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType


class NodeType(StrEnum):
    """The kind of object a node represents."""

    DIRECTORY = "dir"
    FILE = "file"


@dataclass(frozen=True)
class NodeMeta:
    """Descriptive metadata attached to a node.

    Attributes:
        title: Display title (may differ from the node name).
        tags: Free-form tags used by ``search``.
        date: ISO date string, if known.
        description: Short description, if any.

    """

    title: str | None = None
    tags: tuple[str, ...] = ()
    date: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class FileNode:
    """A readable note in the library."""

    name: str
    slug: str
    meta: NodeMeta = field(default_factory=NodeMeta)
    content: str = ""

    @property
    def node_type(self) -> NodeType:
        """Return the node tag."""
        return NodeType.FILE

    @property
    def title(self) -> str | None:
        """Return the metadata title, if any."""
        return self.meta.title


@dataclass(frozen=True)
class DirectoryNode:
    """A folder of notes and sub-folders.

    ``children`` may be passed as any mapping; it is copied into a
    read-only proxy on construction.
    """

    name: str
    children: Mapping[str, FilesystemNode] = field(default_factory=lambda: MappingProxyType({}))
    meta: NodeMeta | None = None

    def __post_init__(self) -> None:
        """Freeze the children mapping and check name consistency."""
        frozen: dict[str, FilesystemNode] = dict(self.children)
        for key, child in frozen.items():
            if key != child.name:
                msg = f"Child key {key!r} does not match node name {child.name!r}"
                raise ValueError(msg)
        object.__setattr__(self, "children", MappingProxyType(frozen))

    @property
    def node_type(self) -> NodeType:
        """Return the node tag."""
        return NodeType.DIRECTORY

    @property
    def title(self) -> str | None:
        """Return the metadata title, if any."""
        return self.meta.title if self.meta is not None else None


FilesystemNode: TypeAlias = DirectoryNode | FileNode


def display_title(node: FilesystemNode, name: str) -> str | None:
    """Return the node title when it adds something beyond *name*."""
    title = node.title
    if title and title != name:
        return title
    return None
