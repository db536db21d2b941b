# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for Cortex Arena.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables
- YAML loader: Utilities for loading YAML configuration files

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.gaming.max_search_depth)
    9

    >>> from src.core.config import load_yaml
    >>> config = load_yaml(Path("config/personas.yaml"))
"""

from src.core.config.settings import (
    GamingSettings,
    OracleSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from src.core.config.yaml_loader import (
    YAMLLoadError,
    load_yaml,
    load_yaml_list,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "OracleSettings",
    "GamingSettings",
    # YAML utilities
    "load_yaml",
    "load_yaml_list",
    "YAMLLoadError",
]
