"""Tests for config loader module."""

import json

import pytest

from snap_orchestrator.__util__ import MissingPropertyError
from snap_orchestrator.config.loader import (
    ConfigError,
    find_config_file,
    generate_example_config,
    load_config,
    parse_config,
)


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_explicit_file(self, config_file):
        """Test finding explicitly specified config file."""
        assert find_config_file(str(config_file)) == config_file.resolve()

    def test_directory_holding_snap_json(self, config_file):
        """Test that a directory resolves to the snap.json inside it."""
        assert find_config_file(str(config_file.parent)) == config_file.resolve()

    def test_blank_uses_working_directory(self, config_file):
        """Test that no location means snap.json in the working directory."""
        assert find_config_file(None, cwd=config_file.parent) == config_file.resolve()
        assert find_config_file("  ", cwd=config_file.parent) == config_file.resolve()

    def test_relative_path(self, config_file):
        """Test relative locations resolve against cwd."""
        result = find_config_file("snap.json", cwd=config_file.parent)
        assert result == config_file.resolve()

    def test_missing_file(self, tmp_path):
        """Test error when nothing exists at the location."""
        with pytest.raises(ConfigError, match="Configuration does not exist"):
            find_config_file(str(tmp_path / "nope.json"))

    def test_directory_without_snap_json(self, tmp_path):
        """Test error for a directory with no snap.json."""
        with pytest.raises(ConfigError, match="Configuration does not exist"):
            find_config_file(str(tmp_path))

    def test_missing_default(self, tmp_path):
        """Test error when the working directory has no snap.json."""
        with pytest.raises(ConfigError, match="snap.json"):
            find_config_file(None, cwd=tmp_path)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_json(self, config_file):
        """Test loading a valid JSON configuration."""
        config, warnings = load_config(config_file)

        assert config.name == "shop"
        assert [t.type for t in config.targets] == ["mssql", "elasticsearch"]
        assert config.configuration_directory == str(config_file.parent.resolve())
        assert config.configuration_file == "snap.json"
        assert warnings == []

    def test_load_json_with_bom(self, tmp_path, sample_config_data):
        """Test that a UTF-8 byte order mark is accepted."""
        path = tmp_path / "snap.json"
        path.write_bytes(b"\xef\xbb\xbf" + json.dumps(sample_config_data).encode())
        config, _ = load_config(path)
        assert config.name == "shop"

    def test_load_toml(self, tmp_path):
        """Test loading a TOML configuration."""
        path = tmp_path / "snap.toml"
        path.write_text(
            """
name = "shop"

[properties]
GitRepositoryRoot = "."

[[targets]]
type = "mssql"
name = "orders"

[targets.properties]
ConnectionString = "Server=db1;Database=Orders"

[targets.pack]
enable = true
"""
        )
        config, warnings = load_config(path)

        assert config.properties["GitRepositoryRoot"] == "."
        assert config.targets[0].is_enabled("pack")
        assert not config.targets[0].is_enabled("unpack")
        assert warnings == []

    def test_invalid_json(self, tmp_path):
        """Test error on malformed JSON."""
        path = tmp_path / "snap.json"
        path.write_text("{ invalid json")
        with pytest.raises(ConfigError, match="Invalid JSON syntax"):
            load_config(path)

    def test_invalid_toml(self, tmp_path):
        """Test error on malformed TOML."""
        path = tmp_path / "snap.toml"
        path.write_text("[invalid toml")
        with pytest.raises(ConfigError, match="Invalid TOML syntax"):
            load_config(path)

    def test_unreadable(self, tmp_path):
        """Test error when the file cannot be read."""
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(tmp_path / "missing.json")

    def test_validation_errors_name_the_file(self, tmp_path):
        """Test that validation errors mention the file and every problem."""
        path = tmp_path / "snap.json"
        path.write_text(json.dumps({"targets": [{"name": "x"}, {"type": 3}]}))

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert str(path) in str(exc_info.value)
        assert len(exc_info.value.errors) == 2
        assert "targets[0]: missing required 'type' field" in str(exc_info.value)
        assert "targets[1]" in str(exc_info.value)


class TestParseConfig:
    """Tests for parse_config function."""

    def test_root_must_be_object(self):
        """Test that a non-object root is rejected."""
        with pytest.raises(ConfigError, match="root must be an object"):
            parse_config([1, 2])

    def test_keys_are_case_insensitive(self):
        """Test PascalCase and camelCase keys are both accepted."""
        config = parse_config(
            {
                "Name": "shop",
                "Targets": [
                    {
                        "Type": "mssql",
                        "IsRunningInDocker": True,
                        "NameParts": ["a", "b"],
                        "Pack": {"Enable": True},
                    }
                ],
            }
        )
        target = config.targets[0]

        assert config.name == "shop"
        assert target.is_running_in_docker is True
        assert target.name_parts == ("a", "b")
        assert target.is_enabled("pack")

    def test_restore_alias(self):
        """Test that 'restore' is accepted in place of 'unpack'."""
        config = parse_config({"targets": [{"type": "mssql", "restore": {"enable": True}}]})
        assert config.targets[0].is_enabled("unpack")

    def test_boolean_task_switch(self):
        """Test that a bare boolean is accepted as a task switch."""
        config = parse_config({"targets": [{"type": "mssql", "clean": True}]})
        assert config.targets[0].is_enabled("clean")

    def test_absent_task_is_disabled(self):
        """Test that a missing task block disables the task."""
        config = parse_config({"targets": [{"type": "mssql"}]})
        for task in ("pack", "unpack", "clean"):
            assert not config.targets[0].is_enabled(task)

    def test_unknown_task_name(self):
        """Test that asking for an unknown task is an error."""
        config = parse_config({"targets": [{"type": "mssql"}]})
        with pytest.raises(ValueError):
            config.targets[0].is_enabled("bake")

    def test_property_values_are_strings(self):
        """Test numbers become strings and nested values are rejected."""
        config = parse_config({"properties": {"Port": 1433}})
        assert config.properties["Port"] == "1433"

        with pytest.raises(ConfigError, match="property 'Nested' must be a string"):
            parse_config({"properties": {"Nested": {"a": 1}}})

    def test_bad_types_are_collected(self):
        """Test that every type error is reported at once."""
        with pytest.raises(ConfigError) as exc_info:
            parse_config(
                {
                    "name": 1,
                    "targets": [
                        {"type": "mssql", "isRunningInDocker": "yes"},
                        {"type": "mssql", "pack": {"enable": "true"}},
                        {"type": "mssql", "nameParts": "a"},
                    ],
                }
            )
        assert len(exc_info.value.errors) == 4

    def test_targets_keep_declaration_order(self):
        """Test that targets come back in declaration order."""
        config = parse_config(
            {"targets": [{"type": "b", "clean": True}, {"type": "a", "clean": True}]}
        )
        assert [t.type for t in config.get_enabled_targets("clean")] == ["b", "a"]


class TestProperties:
    """Tests for target/global property lookup."""

    def test_target_overrides_global(self):
        """Test that target properties win over global ones."""
        config = parse_config(
            {
                "properties": {"Host": "global"},
                "targets": [{"type": "x", "properties": {"Host": "local"}}, {"type": "y"}],
            }
        )
        assert config.get_property(config.targets[0], "Host") == "local"
        assert config.get_property(config.targets[1], "Host") == "global"

    def test_default(self, sample_config):
        """Test the default for an absent property."""
        target = sample_config.targets[0]
        assert sample_config.get_property(target, "Nope", "fallback") == "fallback"

    def test_require_missing(self, sample_config):
        """Test that a required property names the key and target type."""
        target = sample_config.targets[1]
        with pytest.raises(MissingPropertyError, match="'ContainerId' in target 'elasticsearch'"):
            sample_config.require_property(target, "ContainerId")


class TestWarnings:
    """Tests for configuration warnings."""

    def _load(self, tmp_path, data):
        path = tmp_path / "snap.json"
        path.write_text(json.dumps(data))
        return load_config(path)[1]

    def test_no_targets(self, tmp_path):
        assert "No targets configured" in self._load(tmp_path, {})

    def test_target_without_tasks(self, tmp_path):
        warnings = self._load(tmp_path, {"targets": [{"type": "mssql", "name": "a"}]})
        assert "Target 'mssql:a' has no enabled task" in warnings

    def test_docker_target_without_container(self, tmp_path):
        warnings = self._load(
            tmp_path, {"targets": [{"type": "mssql", "isRunningInDocker": True, "pack": True}]}
        )
        assert any("ContainerId" in w for w in warnings)

    def test_duplicate_targets(self, tmp_path):
        warnings = self._load(
            tmp_path,
            {"targets": [{"type": "mssql", "pack": True}, {"type": "mssql", "pack": True}]},
        )
        assert any("share the same type and name" in w for w in warnings)


class TestExampleConfig:
    """Tests for generate_example_config."""

    def test_example_parses(self):
        """Test that the example is a valid configuration."""
        config = parse_config(json.loads(generate_example_config()))
        assert {t.type for t in config.targets} == {"mssql", "elasticsearch"}
