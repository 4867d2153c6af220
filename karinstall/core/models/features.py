"""
Feature models — the in-memory form of a Karaf features descriptor.

A FeatureRepository is parsed once from its XML file and never
mutated afterwards; everything here is frozen so features can be used
as dictionary keys in the feature registry.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FEATURE_VERSION = "0.0.0"
_LEADING_DIGITS = re.compile(r"\d*")


class Bundle(BaseModel):
    """A bundle entry inside a feature."""

    model_config = ConfigDict(frozen=True)

    location: str
    start_level: int = 0  # 0 = use the configured default
    dependency: bool = False


class ConfigFile(BaseModel):
    """A configuration file copied verbatim into the system tree."""

    model_config = ConfigDict(frozen=True)

    location: str
    final_name: str = ""
    override: bool = False


class Dependency(BaseModel):
    """A reference from one feature to another, by name and optional version.

    The version may be an exact version (``2.0``) or an OSGi range
    (``[1,2)``); ``0.0.0`` or no version accepts any version.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str | None = None

    def matches(self, feature: Feature) -> bool:
        """Whether ``feature`` carries the referenced name."""
        return feature.name == self.name

    def accepts(self, version: str) -> bool:
        """Whether ``version`` satisfies the requested version or range."""
        wanted = (self.version or "").strip()
        if not wanted or wanted == DEFAULT_FEATURE_VERSION:
            return True
        if wanted[0] in "[(" and wanted[-1] in "])" and "," in wanted:
            low, high = (part.strip() for part in wanted[1:-1].split(",", 1))
            actual = parse_version(version)
            if low and not _within(parse_version(low), actual, wanted[0] == "["):
                return False
            if high and not _within(actual, parse_version(high), wanted[-1] == "]"):
                return False
            return True
        return parse_version(wanted) == parse_version(version)


def parse_version(text: str) -> tuple[int, int, int, str]:
    """OSGi version ``major[.minor[.micro[.qualifier]]]`` as a comparable tuple.

    Non-numeric segments compare as 0 so Maven-style versions like
    ``1.0-SNAPSHOT`` still order sensibly.
    """
    parts = text.strip().split(".", 3)
    numbers = []
    for part in parts[:3]:
        digits = _LEADING_DIGITS.match(part).group()
        numbers.append(int(digits) if digits else 0)
    while len(numbers) < 3:
        numbers.append(0)
    qualifier = parts[3] if len(parts) > 3 else ""
    return numbers[0], numbers[1], numbers[2], qualifier


def _within(lower: tuple, upper: tuple, inclusive: bool) -> bool:
    return lower <= upper if inclusive else lower < upper


class Feature(BaseModel):
    """A named, versioned set of bundles, config files and dependencies."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = DEFAULT_FEATURE_VERSION
    description: str = ""
    bundles: tuple[Bundle, ...] = ()
    config_files: tuple[ConfigFile, ...] = ()
    dependencies: tuple[Dependency, ...] = ()

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the feature: (name, version)."""
        return (self.name, self.version)

    @property
    def label(self) -> str:
        return f"{self.name}/{self.version}"

    def __hash__(self) -> int:
        return hash(self.key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return self.key == other.key


class FeatureRepository(BaseModel):
    """A parsed features descriptor, identified by the URI it was loaded from."""

    model_config = ConfigDict(frozen=True)

    uri: str
    name: str = ""
    repositories: tuple[str, ...] = ()
    features: tuple[Feature, ...] = Field(default_factory=tuple)

    def get_feature(self, name: str) -> Feature | None:
        """Look up the first feature with the given name."""
        for feature in self.features:
            if feature.name == name:
                return feature
        return None


class Tier(str, Enum):
    """Where a resolved feature's membership is recorded."""

    STARTUP = "startup"
    BOOT = "boot"
    INSTALLED = "installed"
    UNLISTED = "unlisted"
