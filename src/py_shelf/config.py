"""Shell configuration — tunables loaded from an optional JSON file.

Every field has a default, so a missing file is not an error; the
shell simply runs with ``ShellConfig()``.  A file that exists but
cannot be read or decoded is an error, raised as ``ConfigError``
before any session starts.

Example ``shelf.json``::

    {"initial_cwd": "/books", "tree_depth": 2, "library_path": "library.json"}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from py_shelf.errors import MAX_FIXES
from py_shelf.fs.paths import ROOT_PATH
from py_shelf.tree import DEFAULT_TREE_DEPTH

DEFAULT_LOG_LIMIT = 1000


class ConfigError(RuntimeError):
    """Raise when a configuration file cannot be loaded."""


@dataclass(frozen=True)
class ShellConfig:
    """Settings for one shell instance.

    Attributes:
        initial_cwd: Where new sessions start.
        tree_depth: Default depth for ``tree``.
        fix_limit: Maximum fix suggestions per error.
        fuzzy_path_limit: Maximum did-you-mean path candidates.
        chip_count: How many try chips to offer.
        library_path: JSON content tree to load instead of the sample.
        prompt_host: Host name shown in the REPL prompt.
        log_limit: Maximum audit-log entries kept per session.

    """

    initial_cwd: str = ROOT_PATH
    tree_depth: int = DEFAULT_TREE_DEPTH
    fix_limit: int = MAX_FIXES
    fuzzy_path_limit: int = 6
    chip_count: int = 3
    library_path: Path | None = None
    prompt_host: str = "shelf"
    log_limit: int = DEFAULT_LOG_LIMIT

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, base_dir: Path | None = None) -> ShellConfig:
        """Build a config from decoded JSON, ignoring unknown keys.

        Args:
            data: The decoded document.
            base_dir: Directory that relative ``library_path`` values
                are resolved against.

        Raises:
            ConfigError: If a numeric field is not a non-negative integer.

        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}

        for key in ("tree_depth", "fix_limit", "fuzzy_path_limit", "chip_count", "log_limit"):
            if key in values and (not isinstance(values[key], int) or values[key] < 0):
                msg = f"{key} must be a non-negative integer, got {values[key]!r}"
                raise ConfigError(msg)
        if values.get("log_limit") == 0:
            msg = "log_limit must be positive"
            raise ConfigError(msg)

        library = values.get("library_path")
        if library is not None:
            path = Path(library)
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            values["library_path"] = path

        return cls(**values)


def load_config(path: Path | None) -> ShellConfig:
    """Load configuration from a JSON file, or defaults if *path* is None.

    Raises:
        ConfigError: If the file cannot be read or decoded.

    """
    if path is None:
        return ShellConfig()
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load config: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = "Config file must contain a JSON object"
        raise ConfigError(msg)
    return ShellConfig.from_dict(data, base_dir=path.parent)  # pyright: ignore[reportUnknownArgumentType]
