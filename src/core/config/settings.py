"""Application settings using Pydantic Settings.

Precedence, highest first: YAML values (bundled defaults, then the file named
by ``CODEPARSE_CONFIG`` layered on top), environment variables, ``.env``,
field defaults. YAML keys set to null count as absent.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.config.loader import CONFIG_ENV_VAR, ConfigLoader

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _section_config(prefix: str) -> SettingsConfigDict:
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def _present(section: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in section.items() if value is not None}


class ParserSettings(BaseSettings):
    """Language selection and input limits."""

    model_config = _section_config("CODEPARSE_PARSER_")

    default_language: str | None = Field(
        default=None,
        description="Language used when it cannot be inferred from a file extension",
    )
    max_source_bytes: int = Field(
        default=1024 * 1024,
        ge=1,
        description="Largest source file the CLI will read (bytes)",
    )

    @field_validator("default_language", mode="before")
    @classmethod
    def normalize_language(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        return v.strip().lower() or None


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = _section_config("CODEPARSE_LOGGING_")

    level: LogLevel = "WARNING"
    format: str = "[%(name)s] %(message)s"
    file: Path | None = Field(default=None, description="Also log to this file")
    use_rich: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("file", mode="before")
    @classmethod
    def empty_file_is_none(cls, v: Any) -> Any:
        return None if v == "" else v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = _section_config("CODEPARSE_")

    parser: ParserSettings = Field(default_factory=ParserSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, *paths: Path) -> "Settings":
        """Build settings from YAML files, later files overriding earlier ones.

        Raises:
            ConfigurationError: If a file cannot be read.
        """
        loader = ConfigLoader()
        for path in paths:
            loader.merge(path)

        return cls(
            parser=ParserSettings(**_present(loader.get_section("parser"))),
            logging=LoggingSettings(**_present(loader.get_section("logging"))),
        )

    @classmethod
    def load(cls) -> "Settings":
        """Load the bundled defaults plus the user file from ``CODEPARSE_CONFIG``."""
        paths = []
        default_path = ConfigLoader.default_path()
        if default_path.exists():
            paths.append(default_path)
        user_path = os.environ.get(CONFIG_ENV_VAR)
        if user_path:
            paths.append(Path(user_path))

        if not paths:
            return cls()
        return cls.from_yaml(*paths)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.load()
