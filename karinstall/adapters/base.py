"""
Locator base — the contract between the installer and artifact storage.

The installer never touches a Maven repository directly; it asks a
locator for the local file behind a coordinate and for the canonical
path that file takes in the system repository.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from karinstall.core.models.coordinates import MavenCoordinate

# Side-car file written beside a snapshot artifact
METADATA_FILE_NAME = "maven-metadata-local.xml"


class ArtifactLocator(ABC):
    """Abstract base class for artifact locators.

    Subclasses implement ``resolve`` and ``resolve_path``; the layout
    helpers have default implementations based on the Maven layout.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The locator identifier (e.g., 'maven-local', 'mock')."""

    @abstractmethod
    def resolve(self, coordinate: str) -> Path:
        """Return the local file for an ``mvn:`` coordinate.

        Raises:
            ArtifactNotFoundError: If no file exists for the coordinate.
        """

    @abstractmethod
    def resolve_path(self, relative_path: str) -> Path:
        """Return the local file for a canonical repository-relative path.

        Raises:
            ArtifactNotFoundError: If no file exists at that path.
        """

    def path_from_maven(self, coordinate: str) -> str:
        """Canonical repository-relative path of a coordinate."""
        return MavenCoordinate.parse(coordinate).path

    def is_snapshot(self, coordinate: str) -> bool:
        return MavenCoordinate.parse(coordinate).is_snapshot

    @abstractmethod
    def generate_metadata(self, coordinate: str, target: Path) -> None:
        """Write snapshot side-car metadata for ``coordinate`` to ``target``.

        Raises:
            MetadataError: If the metadata cannot be produced.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
