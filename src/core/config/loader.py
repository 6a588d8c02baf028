"""YAML configuration files, layered over the bundled defaults."""

from pathlib import Path
from typing import Any

import yaml

from src.core.exceptions.errors import ConfigurationError

# Environment variable naming a user config file layered over config/default.yaml
CONFIG_ENV_VAR = "CODEPARSE_CONFIG"


def read_yaml(path: Path) -> dict[str, Any]:
    """Read one YAML mapping.

    Raises:
        ConfigurationError: If the file is missing, unparseable, or its root
            is not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            config_key=str(path),
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {path}",
            config_key=str(path),
            details={"error": str(e)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping, got {type(data).__name__}: {path}",
            config_key=str(path),
        )
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Configuration assembled from one or more YAML files.

    Later files override earlier ones key by key, so a user file only needs
    the values it changes.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path
        self._config: dict[str, Any] = {}
        self._sources: list[Path] = []

    def load(self, path: Path | None = None) -> dict[str, Any]:
        """Replace the current configuration with one file.

        Args:
            path: YAML file. Uses config_path if not provided.

        Returns:
            The loaded configuration.

        Raises:
            ConfigurationError: If the file cannot be read.
        """
        load_path = path or self.config_path
        self._config = {}
        self._sources = []
        if load_path:
            self.merge(load_path)
        return self._config

    def merge(self, path: Path) -> dict[str, Any]:
        """Layer another file over the current configuration.

        Raises:
            ConfigurationError: If the file cannot be read.
        """
        self._config = _deep_merge(self._config, read_yaml(Path(path)))
        self._sources.append(Path(path))
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a value with dot notation (``parser.default_language``)."""
        value: Any = self._config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """Get one top-level section; absent or null sections are empty.

        Raises:
            ConfigurationError: If the section is present but not a mapping.
        """
        value = self._config.get(section)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(
                f"Configuration section '{section}' must be a mapping",
                config_key=section,
                details={"sources": [str(p) for p in self._sources]},
            )
        return value

    @property
    def config(self) -> dict[str, Any]:
        return self._config

    @property
    def sources(self) -> list[Path]:
        """Files merged so far, in order."""
        return list(self._sources)

    @staticmethod
    def default_path() -> Path:
        """Location of the bundled default configuration file."""
        return Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"
