"""Configuration management for outdated-why."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from outdated_why.core.models import Priority
from outdated_why.errors import ConfigurationError

CONFIG_FILENAMES = (".outdated-why.yml", ".outdated-why.yaml")


class AnalysisConfig(BaseModel):
    """Configuration for package classification."""

    package_manager: str = Field(
        default="npm",
        description="Package manager used to prefix suggested commands (npm, pnpm, yarn)",
    )
    include_dev: bool = Field(
        default=True,
        description="Analyze development dependencies",
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Package names to leave out of the report",
    )
    breaking_changes_file: str | None = Field(
        default=None,
        description="YAML file with extra or overriding breaking-change entries",
    )

    @field_validator("package_manager")
    @classmethod
    def validate_package_manager(cls, v: str) -> str:
        """Validate package manager value."""
        allowed = {"npm", "pnpm", "yarn"}
        if v.lower() not in allowed:
            raise ValueError(f"package_manager must be one of: {allowed}")
        return v.lower()


class CiConfig(BaseModel):
    """Configuration for CI mode."""

    fail_on: Priority = Field(
        default=Priority.CRITICAL,
        description="Fail CI when any package is at or above this priority",
    )


class OutputConfig(BaseModel):
    """Configuration for report output."""

    format: str = Field(
        default="json",
        description="Report format (json, markdown)",
    )
    max_important: int = Field(
        default=5,
        ge=1,
        description="Important updates listed by the fix command",
    )

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate output format value."""
        value = v.lower()
        if value == "md":
            value = "markdown"
        allowed = {"json", "markdown"}
        if value not in allowed:
            raise ValueError(f"format must be one of: {allowed}")
        return value


class OutdatedWhyConfig(BaseModel):
    """Complete outdated-why configuration."""

    version: int = Field(default=1, description="Configuration file version")
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    ci: CiConfig = Field(default_factory=CiConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest .outdated-why.yml configuration file.

    Searches from start_path up to the root directory.

    Args:
        start_path: Starting directory for search (defaults to cwd).

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.exists():
                return config_path

        current = current.parent

    return None


def load_config(
    config_path: Path | None = None,
    env_prefix: str = "OUTDATED_WHY_",
) -> OutdatedWhyConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file
    3. Defaults

    Args:
        config_path: Path to config file (searches if not provided).
        env_prefix: Prefix for environment variables.

    Returns:
        Loaded configuration.

    Raises:
        ConfigurationError: If the file is not valid YAML.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path and config_path.exists():
        try:
            with open(config_path) as f:
                file_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}",
                hint=str(e),
            ) from e
        if file_data:
            if not isinstance(file_data, dict):
                raise ConfigurationError(
                    f"Configuration in {config_path} must be a mapping",
                    hint="Run `outdated-why config init` to generate an example file.",
                )
            # Empty sections (`output:` with nothing under it) fall back to defaults.
            config_data = {k: v for k, v in file_data.items() if v is not None}

    package_manager = os.environ.get(f"{env_prefix}PACKAGE_MANAGER")
    if package_manager:
        config_data["analysis"] = {**(config_data.get("analysis") or {}), "package_manager": package_manager}

    fail_on = os.environ.get(f"{env_prefix}FAIL_ON")
    if fail_on:
        config_data["ci"] = {**(config_data.get("ci") or {}), "fail_on": fail_on.lower()}

    return OutdatedWhyConfig(**config_data)


def generate_example_config() -> str:
    """Generate an example configuration file.

    Returns:
        YAML string of example configuration.
    """
    example = """# outdated-why configuration

version: 1

# Classification settings
analysis:
  # Package manager used in suggested commands: npm, pnpm, or yarn
  package_manager: npm
  # Analyze development dependencies
  include_dev: true
  # Packages to leave out of the report
  ignore: []
  # Extra breaking-change entries (package -> major -> summary/url/effort)
  # breaking_changes_file: ./breaking-changes.yml

# CI mode settings
ci:
  # Fail when any package is at or above: critical, important, safe, skip
  fail_on: critical

# Report output settings
output:
  # Report format: json or markdown
  format: json
  # Important updates listed by the fix command
  max_important: 5
"""
    return example
