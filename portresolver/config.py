"""Configuration loading for the port resolution engine.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
- Merge command-line overrides on top of the environment
"""

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

KNOWN_FEATURE_FLAGS = frozenset({"versions", "manifests", "registries", "binarycaching"})


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Repository layout
    vcpkg_root: Path = Field(
        default=Path("."),
        description="Root of the repository holding ports/ and port_versions/",
    )
    ports_dir_name: str = Field(
        default="ports",
        description="Directory of the builtin ports tree, relative to the root",
    )
    versions_dir_name: str = Field(
        default="port_versions",
        description="Directory of version databases and the baseline, relative to the root",
    )
    buildtrees_dir: Path | None = Field(
        default=None,
        description="Directory for extracted historical trees (default: <root>/buildtrees)",
    )

    # Resolution
    overlay_ports: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Overlay port directories in precedence order",
    )
    baseline: str | None = Field(
        default=None,
        description="Commit pinning the baseline document",
    )
    feature_flags: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["versions"],
        description="Enabled feature flags",
    )

    # Version control
    git_executable: str = Field(
        default="git",
        description="git executable used for historical checkouts",
    )
    git_timeout_seconds: int = Field(
        default=120,
        description="Timeout for each git invocation in seconds",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("overlay_ports", "feature_flags", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any) -> Any:
        """Accept comma-separated strings for list settings."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("feature_flags")
    @classmethod
    def validate_feature_flags(cls, v: list[str]) -> list[str]:
        """Ensure every feature flag is known."""
        unknown = sorted(set(v) - KNOWN_FEATURE_FLAGS)
        if unknown:
            raise ValueError(f"unknown feature flags: {', '.join(unknown)}")
        return v

    @field_validator("git_timeout_seconds")
    @classmethod
    def validate_git_timeout(cls, v: int) -> int:
        """Ensure git timeout is positive."""
        if v <= 0:
            raise ValueError("git_timeout_seconds must be positive")
        return v

    @field_validator("baseline")
    @classmethod
    def validate_baseline(cls, v: str | None) -> str | None:
        """Treat an empty baseline as no baseline."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def resolved_buildtrees_dir(self) -> Path:
        if self.buildtrees_dir is not None:
            return self.buildtrees_dir
        return self.vcpkg_root / "buildtrees"


def load_settings(env_file: str | None = None, **overrides: Any) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.
        **overrides: Values taking precedence over the environment,
                 typically from command-line flags. None values are ignored.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    if env_file:
        return Settings(_env_file=env_file, **values)  # type: ignore[call-arg]
    return Settings(**values)


__all__ = ["KNOWN_FEATURE_FLAGS", "Settings", "load_settings"]
