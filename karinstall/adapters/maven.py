"""
Local Maven repository locator.

Looks artifacts up in an ordered list of directories laid out like a
Maven local repository (``~/.m2/repository`` by default). The first
repository holding the file wins.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from pathlib import Path

from karinstall.adapters.base import ArtifactLocator
from karinstall.core.errors import ArtifactNotFoundError, MetadataError
from karinstall.core.models.coordinates import MavenCoordinate

logger = logging.getLogger(__name__)


class LocalRepositoryLocator(ArtifactLocator):
    """Resolve coordinates against local Maven-layout directories."""

    def __init__(self, repositories: list[Path]):
        self._repositories = [Path(r).expanduser() for r in repositories]

    @property
    def name(self) -> str:
        return "maven-local"

    @property
    def repositories(self) -> list[Path]:
        return list(self._repositories)

    def resolve(self, coordinate: str) -> Path:
        try:
            relative = self.path_from_maven(coordinate)
        except ValueError as e:
            raise ArtifactNotFoundError(coordinate) from e
        found = self._lookup(relative)
        if found is None:
            raise ArtifactNotFoundError(coordinate, self._repositories)
        logger.debug("Resolved %s -> %s", coordinate, found)
        return found

    def resolve_path(self, relative_path: str) -> Path:
        found = self._lookup(relative_path)
        if found is None:
            raise ArtifactNotFoundError(relative_path, self._repositories)
        return found

    def _lookup(self, relative_path: str) -> Path | None:
        for repo in self._repositories:
            candidate = repo / relative_path
            if candidate.is_file():
                return candidate
        return None

    def generate_metadata(self, coordinate: str, target: Path) -> None:
        try:
            coord = MavenCoordinate.parse(coordinate)
        except ValueError as e:
            raise MetadataError(str(e)) from e

        content = render_snapshot_metadata(coord, datetime.now(UTC))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise MetadataError(f"Cannot write {target}: {e}") from e
        logger.debug("Wrote snapshot metadata for %s to %s", coordinate, target)


def render_snapshot_metadata(coord: MavenCoordinate, when: datetime) -> str:
    """Render a ``maven-metadata-local.xml`` marking ``coord`` as a local snapshot copy."""
    stamp = when.strftime("%Y%m%d%H%M%S")

    metadata = ET.Element("metadata", modelVersion="1.1.0")
    ET.SubElement(metadata, "groupId").text = coord.group_id
    ET.SubElement(metadata, "artifactId").text = coord.artifact_id
    ET.SubElement(metadata, "version").text = coord.version

    versioning = ET.SubElement(metadata, "versioning")
    snapshot = ET.SubElement(versioning, "snapshot")
    ET.SubElement(snapshot, "localCopy").text = "true"
    ET.SubElement(versioning, "lastUpdated").text = stamp

    versions = ET.SubElement(versioning, "snapshotVersions")
    entry = ET.SubElement(versions, "snapshotVersion")
    if coord.classifier:
        ET.SubElement(entry, "classifier").text = coord.classifier
    ET.SubElement(entry, "extension").text = coord.type
    ET.SubElement(entry, "value").text = coord.version
    ET.SubElement(entry, "updated").text = stamp

    ET.indent(metadata)
    body = ET.tostring(metadata, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"
