"""Configuration loading and validation.

Handles config file discovery, JSON/TOML parsing, and validation with
helpful error messages. Every validation error found is reported at once.
"""

import json
import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

from ..__util__ import SnapError
from .schema import SnapConfig, TargetConfig, TaskSpec

DEFAULT_CONFIG_NAME = "snap.json"


class ConfigError(SnapError):
    """Configuration loading or validation error."""

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        self.errors = list(errors or [])
        if self.errors:
            message = message + "\n" + "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(message)


def find_config_file(location: Optional[str] = None, cwd: Optional[Path] = None) -> Path:
    """Find the configuration file.

    Args:
        location: A file, or a directory holding snap.json. Blank means
            snap.json in the working directory.
        cwd: Working directory to resolve against (defaults to Path.cwd())

    Returns:
        Absolute path to the configuration file

    Raises:
        ConfigError: If nothing usable exists at the location
    """
    cwd = Path(cwd) if cwd is not None else Path.cwd()

    if not location or not str(location).strip():
        candidate = cwd / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            return candidate.resolve()
        raise ConfigError(f"Configuration does not exist ('{candidate}')")

    path = Path(location).expanduser()
    if not path.is_absolute():
        path = cwd / path

    if path.is_file():
        return path.resolve()
    if path.is_dir() and (path / DEFAULT_CONFIG_NAME).is_file():
        return (path / DEFAULT_CONFIG_NAME).resolve()

    raise ConfigError(f"Configuration does not exist ('{location}')")


def _lower_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Keys are matched case-insensitively (nameParts, NameParts, nameparts)."""
    return {str(k).lower(): v for k, v in data.items()}


def _parse_properties(data: Any, where: str, errors: list[str]) -> MappingProxyType:
    """Parse a string->string property map."""
    if data is None:
        return MappingProxyType({})
    if not isinstance(data, dict):
        errors.append(f"{where}: 'properties' must be an object")
        return MappingProxyType({})

    properties = {}
    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            errors.append(f"{where}: property '{key}' must be a string")
            continue
        properties[str(key)] = str(value)
    return MappingProxyType(properties)


def _parse_task(data: Any, where: str, errors: list[str]) -> Optional[TaskSpec]:
    """Parse a {enable: bool} task switch."""
    if data is None:
        return None
    if isinstance(data, bool):
        return TaskSpec(enable=data)
    if not isinstance(data, dict):
        errors.append(f"{where} must be an object with an 'enable' flag")
        return None

    enable = _lower_keys(data).get("enable", False)
    if not isinstance(enable, bool):
        errors.append(f"{where}.enable must be true or false")
        return None
    return TaskSpec(enable=enable)


def _parse_target(data: Any, index: int, errors: list[str]) -> Optional[TargetConfig]:
    """Parse target configuration from dict."""
    where = f"targets[{index}]"
    if not isinstance(data, dict):
        errors.append(f"{where} must be an object")
        return None
    data = _lower_keys(data)

    target_type = data.get("type")
    if not isinstance(target_type, str) or not target_type.strip():
        errors.append(f"{where}: missing required 'type' field")
        return None

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        errors.append(f"{where}: 'name' must be a string")
        name = None

    in_docker = data.get("isrunningindocker", False)
    if not isinstance(in_docker, bool):
        errors.append(f"{where}: 'isRunningInDocker' must be true or false")
        in_docker = False

    name_parts = data.get("nameparts")
    if name_parts is not None:
        if not isinstance(name_parts, list) or not all(
            p is None or isinstance(p, str) for p in name_parts
        ):
            errors.append(f"{where}: 'nameParts' must be a list of strings")
            name_parts = None
        else:
            name_parts = tuple(name_parts)

    # "restore" is accepted as an alias of "unpack"
    unpack = data.get("unpack", data.get("restore"))

    return TargetConfig(
        type=target_type.strip(),
        name=name,
        is_running_in_docker=in_docker,
        properties=_parse_properties(data.get("properties"), where, errors),
        pack=_parse_task(data.get("pack"), f"{where}.pack", errors),
        unpack=_parse_task(unpack, f"{where}.unpack", errors),
        clean=_parse_task(data.get("clean"), f"{where}.clean", errors),
        name_parts=name_parts,
    )


def parse_config(
    data: Any,
    configuration_directory: Optional[str] = None,
    configuration_file: Optional[str] = None,
) -> SnapConfig:
    """Build a SnapConfig from already decoded data.

    Raises:
        ConfigError: Listing every validation error found
    """
    errors: list[str] = []
    if not isinstance(data, dict):
        raise ConfigError(
            "Configuration is not valid:", ["Configuration root must be an object"]
        )
    data = _lower_keys(data)

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        errors.append("'name' must be a string")
        name = None

    raw_targets = data.get("targets", [])
    if not isinstance(raw_targets, list):
        errors.append("'targets' must be a list")
        raw_targets = []

    properties = _parse_properties(data.get("properties"), "configuration", errors)
    targets = [_parse_target(t, i, errors) for i, t in enumerate(raw_targets)]

    if errors:
        raise ConfigError("Configuration is not valid:", errors)

    return SnapConfig(
        name=name,
        properties=properties,
        targets=tuple(t for t in targets if t is not None),
        configuration_directory=configuration_directory,
        configuration_file=configuration_file,
    )


def _validate_config(config: SnapConfig) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    if not config.targets:
        warnings.append("No targets configured")

    for target in config.targets:
        if not any(target.is_enabled(task) for task in ("pack", "unpack", "clean")):
            warnings.append(f"Target '{target}' has no enabled task")

        if target.is_running_in_docker and config.get_property(target, "ContainerId") is None:
            warnings.append(
                f"Target '{target}' runs in docker but has no 'ContainerId' property"
            )

    names = [str(t) for t in config.targets]
    if len(names) != len(set(names)):
        warnings.append(
            "Several targets share the same type and name; their artifacts may collide"
        )

    return warnings


def load_config(path: Path | str) -> tuple[SnapConfig, list[str]]:
    """Load and validate configuration from a JSON or TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (SnapConfig object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        if path.suffix.lower() == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            with open(path, "r", encoding="utf-8-sig") as f:
                data = json.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in '{path}': {e}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON syntax in '{path}': {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    try:
        config = parse_config(
            data,
            configuration_directory=str(path.resolve().parent),
            configuration_file=path.name,
        )
    except ConfigError as e:
        raise ConfigError(f"Configuration at '{path}' is not valid:", e.errors) from e

    return config, _validate_config(config)


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """{
  "name": "my-project",
  "properties": {
    "GitRepositoryRoot": "."
  },
  "targets": [
    {
      "name": "orders",
      "type": "mssql",
      "isRunningInDocker": true,
      "properties": {
        "ConnectionString": "Server=localhost,1433;Database=Orders;User Id=sa;Password=changeme;TrustServerCertificate=True",
        "ContainerId": "mssql"
      },
      "pack": { "enable": true },
      "unpack": { "enable": true },
      "clean": { "enable": false }
    },
    {
      "name": "search",
      "type": "elasticsearch",
      "properties": {
        "Host": "http://localhost:9200",
        "RepositoryPath": "/usr/share/elasticsearch/snapshots",
        "Indices": "orders-*"
      },
      "pack": { "enable": true },
      "unpack": { "enable": true },
      "clean": { "enable": true }
    }
  ]
}
"""
