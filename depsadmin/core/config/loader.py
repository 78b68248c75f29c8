"""
Configuration loader — reads depsadmin.yml into a Settings model.

The file is optional. It is looked up from the working directory
upwards, so a monorepo can keep one file at its top level:

    package_manager: pnpm
    reinstall_delay: 1.5
    extra_flags: ["--ignore-scripts"]
    legacy_peer_deps: false
    store_dir: ~/.cache/package-deps-admin
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from depsadmin.core.errors import ConfigError
from depsadmin.core.services.commands import BACKENDS

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "depsadmin.yml"


class Settings(BaseModel):
    """User-tunable behaviour."""

    package_manager: str | None = None
    reinstall_delay: float = Field(default=1.0, ge=0)
    extra_flags: list[str] = Field(default_factory=list)
    legacy_peer_deps: bool = False
    store_dir: str | None = None

    @field_validator("package_manager")
    @classmethod
    def _known_backend(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        if value not in BACKENDS:
            raise ValueError(f"unsupported package manager {value!r} (supported: {', '.join(BACKENDS)})")
        return value


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for depsadmin.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to depsadmin.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None, start_dir: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to depsadmin.yml. If None, searches upward
            from ``start_dir``; no file means default settings.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file(start_dir)
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return Settings()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s", path)
    return settings
