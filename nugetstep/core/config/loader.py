"""
Configuration loader — reads nugetstep.yml into domain models.

Reads YAML, upgrades records written by older versions, validates
against the Pydantic schema and returns typed objects. Saving always
writes the current format.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from nugetstep.core.models.installation import InstallationsConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "nugetstep.yml"

CURRENT_VERSION = 2

# Field names older configs used for the executable path
_LEGACY_PATH_KEYS = ("path_to_nuget", "pathToNuGet")


class ConfigError(Exception):
    """Raised when the configuration file is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for nugetstep.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to nugetstep.yml, or None if not found.
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


def migrate_installation(record: dict[str, Any]) -> dict[str, Any]:
    """Upgrade one installation record to the current field set.

    Version 1 stored the executable under a single path field. If that
    field is present it becomes ``home``.
    """
    migrated = {k: v for k, v in record.items() if k not in _LEGACY_PATH_KEYS}
    for key in _LEGACY_PATH_KEYS:
        legacy_path = record.get(key)
        if legacy_path is not None:
            logger.info("Migrating installation %r: %s -> home", record.get("name"), key)
            migrated["home"] = legacy_path
            break
    if "defaultArgs" in migrated:
        migrated.setdefault("default_args", migrated.pop("defaultArgs"))
    return migrated


def migrate_config(data: dict[str, Any]) -> dict[str, Any]:
    """Apply the versioned-load adapter to a raw config mapping."""
    version = data.get("version", 1)
    if not isinstance(version, int) or version > CURRENT_VERSION:
        raise ConfigError(f"Unsupported config version: {version!r}")

    raw_installations = data.get("installations") or []
    if not isinstance(raw_installations, list):
        raise ConfigError("'installations' must be a list")

    installations = []
    for record in raw_installations:
        if not isinstance(record, dict):
            raise ConfigError(f"Installation entry must be a mapping, got {type(record).__name__}")
        installations.append(migrate_installation(record))

    migrated = dict(data)
    migrated["version"] = CURRENT_VERSION
    migrated["installations"] = installations
    if migrated.get("node") is None:
        migrated.pop("node", None)
    return migrated


def load_config(path: Path | None = None) -> InstallationsConfig:
    """Load and validate the installations configuration.

    Args:
        path: Explicit path to nugetstep.yml. If None, searches upward;
            when nothing is found an empty configuration is returned.

    Returns:
        Validated InstallationsConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using an empty configuration", CONFIG_FILE)
            return InstallationsConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = InstallationsConfig.model_validate(migrate_config(data))
    except ConfigError:
        raise
    except Exception as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded %d installation(s) from %s", len(config.installations), path)
    return config


def save_config(config: InstallationsConfig, path: Path) -> None:
    """Write the configuration to ``path`` (atomic write).

    Uses write-to-temp-then-rename so a crash never leaves a truncated file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)
    data["version"] = CURRENT_VERSION
    content = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)

    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".nugetstep_",
            suffix=".tmp",
        )
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
            logger.debug("Config saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise
