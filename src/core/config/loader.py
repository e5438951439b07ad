"""
Configuration loader — reads installer.yml into ``InstallerConfig``.

Configuration is read ONCE at process start (by main.py) and passed
explicitly to the services that need it.  Nothing here is a global.

Precedence for each value:
    environment variable  >  installer.yml  >  default
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "installer.yml"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when installer configuration is invalid or unreadable."""


class InstallerConfig(BaseModel):
    """Process-wide installer settings."""

    root_dir: Path = Field(default_factory=lambda: Path.home() / ".jdk-installer")
    disable_cache: bool = False
    product: str = "adoptopenjdk"
    os_release_path: str = "/etc/os-release"
    catalog_path: Path | None = None


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for installer.yml starting from ``start_dir``, walking up.

    Returns:
        Path to installer.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None, environ: dict[str, str] | None = None) -> InstallerConfig:
    """Load installer configuration.

    Args:
        path: Explicit installer.yml. If None, searches upward; a missing
            file means defaults.
        environ: Environment mapping (default: ``os.environ``).

    Returns:
        Validated InstallerConfig.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    env = os.environ if environ is None else environ
    explicit = path is not None
    if path is None:
        path = find_config_file()

    data: dict = {}
    if path is not None:
        if not path.is_file():
            if explicit:
                raise ConfigError(f"Config file not found: {path}")
        else:
            data = _read_yaml(path)
            # Relative paths in the file are relative to the file
            for key in ("root_dir", "catalog_path"):
                if data.get(key) and not Path(str(data[key])).is_absolute():
                    data[key] = str(path.parent.resolve() / str(data[key]))

    if env.get("JDKI_ROOT_DIR"):
        data["root_dir"] = env["JDKI_ROOT_DIR"]
    if env.get("JDKI_CACHE_DISABLE"):
        data["disable_cache"] = env["JDKI_CACHE_DISABLE"].strip().lower() in _TRUTHY

    try:
        config = InstallerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.debug("Installer config: root=%s cache=%s",
                 config.root_dir, "off" if config.disable_cache else "on")
    return config


def _read_yaml(path: Path) -> dict:
    logger.debug("Loading installer config from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under an "installer" key or be flat
    return dict(data.get("installer", data))
