"""Runner configuration and configuration file loading."""

from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import Field, ValidationError

from suite_engine.models.base import Model

DEFAULT_TIMEOUT = 5.0


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""


class RunnerConfig(Model):
    """Settings governing a runner."""

    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Seconds a test or hook may run before it is timed out",
    )
    files: Sequence[str] = Field(
        default_factory=list,
        description="Glob patterns of test files, relative to the working directory",
    )
    reporters: Sequence[str] = Field(
        default_factory=lambda: ["log"],
        description="Reporter keys registered under the reporters entry point group",
    )


def load_config(path: Path) -> RunnerConfig:
    """Load runner configuration from a YAML file.

    Args:
        path: Path to a YAML document holding a mapping of settings

    Returns:
        Parsed configuration

    Raises:
        ConfigError: If the file is missing, not valid YAML or invalid

    """
    try:
        content = yaml.safe_load(path.read_text())
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return RunnerConfig()
    if not isinstance(content, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")

    try:
        return RunnerConfig.model_validate(content)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
