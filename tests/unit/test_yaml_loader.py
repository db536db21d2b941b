# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for YAML loader utilities."""

from pathlib import Path

import pytest

from src.core.config.yaml_loader import (
    YAMLLoadError,
    load_yaml,
    load_yaml_list,
)


class TestLoadYaml:
    """Tests for load_yaml function."""

    def test_load_valid_yaml_file(self, tmp_path: Path) -> None:
        """Test loading a valid YAML file."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("key: value\nnested:\n  inner: 42\n")

        result = load_yaml(yaml_file)

        assert result == {"key": "value", "nested": {"inner": 42}}

    def test_load_empty_yaml_file_returns_empty_dict(self, tmp_path: Path) -> None:
        """Test that empty YAML files return empty dict."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert load_yaml(yaml_file) == {}

    def test_load_yaml_with_list_root_raises_error(self, tmp_path: Path) -> None:
        """Test that YAML files with list root raise error."""
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- item1\n- item2\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "YAML root must be a mapping" in str(exc_info.value)

    def test_load_nonexistent_file_raises_error(self, tmp_path: Path) -> None:
        """Test that loading non-existent file raises error."""
        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(tmp_path / "nonexistent.yaml")

        assert "File does not exist" in str(exc_info.value)

    def test_load_directory_instead_of_file_raises_error(self, tmp_path: Path) -> None:
        """Test that loading a directory raises error."""
        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(tmp_path)

        assert "Path is not a file" in str(exc_info.value)

    def test_load_invalid_yaml_syntax_raises_error(self, tmp_path: Path) -> None:
        """Test that invalid YAML syntax raises error."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("key: [unclosed\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "Invalid YAML syntax" in str(exc_info.value)
        assert exc_info.value.path == yaml_file


class TestLoadYamlList:
    """Tests for load_yaml_list function."""

    def test_load_list_of_mappings(self, tmp_path: Path) -> None:
        """Test loading a list stored under a key."""
        yaml_file = tmp_path / "personas.yaml"
        yaml_file.write_text("personas:\n  - tier: 0\n    label: A\n  - tier: 1\n    label: B\n")

        result = load_yaml_list(yaml_file, "personas")

        assert result == [{"tier": 0, "label": "A"}, {"tier": 1, "label": "B"}]

    def test_missing_key_raises_error(self, tmp_path: Path) -> None:
        """Test that a missing key raises error."""
        yaml_file = tmp_path / "other.yaml"
        yaml_file.write_text("other: []\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml_list(yaml_file, "personas")

        assert "Missing top-level key 'personas'" in str(exc_info.value)

    def test_non_list_value_raises_error(self, tmp_path: Path) -> None:
        """Test that a scalar under the key raises error."""
        yaml_file = tmp_path / "scalar.yaml"
        yaml_file.write_text("personas: grandmaster\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml_list(yaml_file, "personas")

        assert "'personas' must be a list of mappings" in str(exc_info.value)
