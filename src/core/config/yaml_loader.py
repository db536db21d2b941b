# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""YAML configuration file loader utilities.

Used for optional override files such as the chess persona ladder.

Example:
    >>> from pathlib import Path
    >>> from src.core.config.yaml_loader import load_yaml, load_yaml_list
    >>> config = load_yaml(Path("config/personas.yaml"))
    >>> personas = load_yaml_list(Path("config/personas.yaml"), "personas")
"""

from pathlib import Path
from typing import Any

import yaml


class YAMLLoadError(Exception):
    """Raised when a YAML file cannot be loaded or has the wrong shape."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize YAMLLoadError.

        Args:
            path: Path to the YAML file that failed to load.
            reason: Description of why the file failed to load.
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load YAML file '{path}': {reason}")


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file whose root is a mapping.

    Args:
        path: Path to the YAML file to load.

    Returns:
        Parsed mapping. Empty dict for an empty file.

    Raises:
        YAMLLoadError: If the file is missing, unreadable, not valid YAML,
            or its root is not a mapping.
    """
    if not path.is_file():
        reason = "Path is not a file" if path.exists() else "File does not exist"
        raise YAMLLoadError(path, reason)

    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise YAMLLoadError(path, f"Cannot read file: {e}") from e
    except yaml.YAMLError as e:
        raise YAMLLoadError(path, f"Invalid YAML syntax: {e}") from e

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise YAMLLoadError(
            path, f"YAML root must be a mapping, got {type(parsed).__name__}"
        )

    return parsed


def load_yaml_list(path: Path, key: str) -> list[dict[str, Any]]:
    """Load a list of mappings stored under a top-level key.

    Args:
        path: Path to the YAML file.
        key: Top-level key holding the list.

    Returns:
        The list of mapping entries.

    Raises:
        YAMLLoadError: If the key is missing or does not hold a list of mappings.
    """
    data = load_yaml(path)

    entries = data.get(key)
    if entries is None:
        raise YAMLLoadError(path, f"Missing top-level key '{key}'")

    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise YAMLLoadError(path, f"'{key}' must be a list of mappings")

    return entries
