"""
Config check use case — validate assembly.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from karinstall.core.config.loader import ConfigError, find_config_file, load_settings
from karinstall.core.models.settings import INSTALL_SCOPES, InstallSettings


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    settings: InstallSettings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "dependency_count": len(self.settings.dependencies) if self.settings else 0,
            "system_directory": str(self.settings.system_dir) if self.settings else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate the assembly configuration and report issues.

    Args:
        config_path: Optional explicit path to assembly.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append("No assembly.yml found.")
        return result
    result.config_path = config_path

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.settings = settings
    result.valid = True
    result.warnings.extend(_check_warnings(settings))
    return result


def _check_warnings(settings: InstallSettings) -> list[str]:
    """Non-fatal issues worth surfacing."""
    warnings: list[str] = []

    if not settings.dependencies:
        warnings.append("No input artifacts declared under 'dependencies'.")

    for artifact in settings.dependencies:
        if artifact.scope not in INSTALL_SCOPES:
            warnings.append(f"{artifact}: scope '{artifact.scope}' is ignored by the installer.")
        if artifact.type != "kar" and artifact.classifier != "features":
            warnings.append(f"{artifact}: neither a kar nor a features repository, ignored.")
        if artifact.file is not None and not artifact.file.is_file():
            warnings.append(f"{artifact}: file not found: {artifact.file}")

    tiers = {
        "startup_features": set(settings.startup_features),
        "boot_features": set(settings.boot_features),
        "installed_features": set(settings.installed_features),
    }
    names = list(tiers)
    for i, first in enumerate(names):
        for second in names[i + 1:]:
            for feature in sorted(tiers[first] & tiers[second]):
                warnings.append(
                    f"Feature '{feature}' is listed in both {first} and {second}; "
                    f"{first} takes precedence."
                )

    for repo in settings.repositories:
        if not repo.is_dir():
            warnings.append(f"Artifact repository not found: {repo}")

    return warnings
