"""
Configuration loader — reads assembly.yml into InstallSettings.

It reads YAML, validates against the Pydantic schema, and anchors
every relative path at the directory holding the config file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from karinstall.core.models.settings import InstallSettings

logger = logging.getLogger(__name__)

# Default config filename
ASSEMBLY_CONFIG_FILE = "assembly.yml"


class ConfigError(Exception):
    """Raised when the assembly configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for assembly.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to assembly.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / ASSEMBLY_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None) -> InstallSettings:
    """Load and validate the assembly configuration.

    Args:
        path: Explicit path to assembly.yml. If None, searches upward.

    Returns:
        Validated InstallSettings with absolute paths.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(
            f"No {ASSEMBLY_CONFIG_FILE} found. Specify one with --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading assembly config from %s", path)

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

    # The YAML may wrap settings under an "assembly" key or be flat
    settings_data = dict(data.get("assembly") or {}) if "assembly" in data else data

    # Input artifacts usually sit alongside "assembly"
    if "dependencies" in data and "dependencies" not in settings_data:
        settings_data["dependencies"] = data["dependencies"]

    try:
        settings = InstallSettings.model_validate(settings_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid assembly configuration in {path}: {e}") from e

    settings = settings.resolve_paths(path.parent.resolve())
    logger.info(
        "Loaded assembly config from %s with %d input artifacts",
        path, len(settings.dependencies),
    )
    return settings
