"""
Manifest builder — startup.properties and the features configuration file.

Two pieces of state survive between runs:

    etc/startup.properties
        bundle path → start level, grouped by feature under a
        ``# feature: <name> version: <version>`` comment.
    etc/org.apache.karaf.features.cfg
        ``featuresBoot`` and ``featuresRepositories``, comma-delimited
        lists appended to, never rewritten from scratch.

Both are loaded at the start of a run and saved at its end.
"""

from __future__ import annotations

import logging
from pathlib import Path

from karinstall.core.errors import ManifestError
from karinstall.core.models.features import Feature
from karinstall.core.persistence.properties import Properties

logger = logging.getLogger(__name__)

STARTUP_HEADER = ["#Bundles to be started on startup, with startlevel"]
FEATURES_BOOT = "featuresBoot"
FEATURES_REPOSITORIES = "featuresRepositories"


def feature_comment(feature: Feature) -> list[str]:
    """Comment block written before the first bundle a feature contributes."""
    return ["", f"# feature: {feature.name} version: {feature.version}"]


class StartupManifest:
    """Ordered bundle → start level mapping backed by startup.properties."""

    def __init__(self, path: Path):
        self.path = path
        self.properties = Properties()
        self._commented: set[tuple[str, str]] = set()

    def load(self) -> None:
        """Load the existing file, or start a fresh one with the default header."""
        if self.path.is_file():
            logger.info("Loading %s", self.path)
            self.properties.load(self.path)
        else:
            logger.info("Creating %s", self.path)
            self.properties = Properties(header=STARTUP_HEADER)

    def __contains__(self, location: object) -> bool:
        return location in self.properties

    def __len__(self) -> int:
        return len(self.properties)

    def locations(self) -> list[str]:
        return self.properties.keys()

    def level(self, location: str) -> int | None:
        raw = self.properties.get(location)
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError as e:
            raise ManifestError(
                self.path, f"start level {raw!r} of {location} is not an integer"
            ) from e

    def add_entry(self, location: str, level: int, feature: Feature | None = None) -> bool:
        """Record ``location`` at ``level``.

        An existing entry only ever moves to a lower level. A new entry
        gets the feature comment if it is the first one ``feature``
        contributes in this run.

        Returns:
            True if the manifest changed.
        """
        current = self.level(location)
        if current is not None:
            if level < current:
                logger.debug("Lowering start level of %s: %d -> %d", location, current, level)
                self.properties.put(location, str(level))
                return True
            return False

        comment = None
        if feature is not None and feature.key not in self._commented:
            comment = feature_comment(feature)
            self._commented.add(feature.key)
        self.properties.put(location, str(level), comment=comment)
        logger.debug("Added %s=%d to startup manifest", location, level)
        return True

    def save(self) -> None:
        logger.info("Generating %s", self.path)
        self.properties.save(self.path)


class DelimitedList:
    """A comma-delimited property value treated as a set of exact tokens.

    Appending keeps the existing text as written and adds
    ``,<token>`` at the end.
    """

    def __init__(self, raw: str | None):
        self.raw = raw or ""

    @property
    def tokens(self) -> list[str]:
        return [t.strip() for t in self.raw.split(",") if t.strip()]

    def __contains__(self, token: object) -> bool:
        return token in self.tokens

    def add(self, token: str) -> bool:
        """Append ``token`` unless it is already listed. Returns True on change."""
        if token in self:
            return False
        self.raw = f"{self.raw},{token}" if self.raw.strip() else token
        return True


class FeaturesConfig:
    """The features configuration file holding the boot list and repository list.

    The file belongs to the base distribution: when it does not exist,
    updates are skipped and nothing is created.
    """

    def __init__(self, path: Path):
        self.path = path
        self.properties = Properties()
        self.exists = False

    def load(self) -> None:
        self.exists = self.path.is_file()
        if self.exists:
            logger.info("Loading %s", self.path)
            self.properties.load(self.path)
        else:
            logger.info("No features configuration at %s, boot list updates are skipped", self.path)
            self.properties = Properties()

    @property
    def boot_features(self) -> DelimitedList:
        return DelimitedList(self.properties.get(FEATURES_BOOT))

    @property
    def repositories(self) -> DelimitedList:
        return DelimitedList(self.properties.get(FEATURES_REPOSITORIES))

    def add_boot_feature(self, name: str) -> bool:
        """Append ``name`` to featuresBoot and persist right away."""
        return self._append(FEATURES_BOOT, name)

    def add_repository(self, uri: str) -> bool:
        """Append ``uri`` to featuresRepositories and persist right away."""
        return self._append(FEATURES_REPOSITORIES, uri)

    def _append(self, key: str, token: str) -> bool:
        if not self.exists:
            return False
        # Pick up edits made to the file since it was last read
        self.properties.load(self.path)
        value = DelimitedList(self.properties.get(key))
        if not value.add(token):
            return False
        self.properties.put(key, value.raw)
        self.properties.save(self.path)
        logger.info("Added %s to %s in %s", token, key, self.path)
        return True

    def save(self) -> None:
        if self.exists:
            self.properties.save(self.path)
