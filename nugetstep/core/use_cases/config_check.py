"""
Config check use case — validate nugetstep.yml and report issues.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from nugetstep.core.config.loader import CONFIG_FILE, ConfigError, find_config_file, load_config
from nugetstep.core.models.installation import InstallationsConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: InstallationsConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "installation_count": len(self.config.installations) if self.config else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate the installations configuration and report issues.

    Args:
        config_path: Optional explicit path to nugetstep.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append(f"No {CONFIG_FILE} found.")
        return result
    result.config_path = config_path

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    if not config.installations:
        result.warnings.append("No installations defined. Steps will use nuget.exe from PATH.")

    names = [i.name for i in config.installations]
    dupes = {n for n in names if names.count(n) > 1}
    if dupes:
        result.errors.append(f"Duplicate installation names: {', '.join(sorted(dupes))}")

    for installation in config.installations:
        if not installation.name.strip():
            result.errors.append("Installation with an empty name.")
            continue
        home = config.node.tool_locations.get(installation.name) or installation.home
        if not home:
            result.errors.append(f"Installation '{installation.name}' has no home.")
        elif "$" in home or "%" in home:
            # Expanded per build; nothing to check statically
            continue
        elif not os.path.isfile(home):
            result.warnings.append(
                f"Installation '{installation.name}' executable does not exist on this node: {home}"
            )

    unknown = sorted(set(config.node.tool_locations) - set(names))
    if unknown:
        result.warnings.append(
            f"Node '{config.node.name}' has tool locations for unknown installations: {', '.join(unknown)}"
        )

    result.valid = len(result.errors) == 0
    return result
