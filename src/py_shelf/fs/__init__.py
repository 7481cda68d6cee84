"""Content tree — immutable nodes, path resolution, and loading.

Re-exports public symbols so callers can write::

    from py_shelf.fs import DirectoryNode, resolve_path
"""

from py_shelf.fs.loader import LibraryLoadError, library_from_dict, load_library, sample_library
from py_shelf.fs.nodes import DirectoryNode, FileNode, FilesystemNode, NodeMeta, NodeType
from py_shelf.fs.paths import (
    ROOT_PATH,
    basename,
    get_node_at_path,
    join_path,
    parent_path,
    resolve_path,
    sorted_children,
)

__all__ = [
    "ROOT_PATH",
    "DirectoryNode",
    "FileNode",
    "FilesystemNode",
    "LibraryLoadError",
    "NodeMeta",
    "NodeType",
    "basename",
    "get_node_at_path",
    "join_path",
    "library_from_dict",
    "load_library",
    "parent_path",
    "resolve_path",
    "sample_library",
    "sorted_children",
]
