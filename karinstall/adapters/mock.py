"""
Mock locator — test double for artifact resolution.

Serves files registered up front, keyed by coordinate, and records
every call so tests can assert how often a coordinate was fetched.
Metadata generation can be told to fail to exercise the warning path.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from karinstall.adapters.base import ArtifactLocator
from karinstall.core.errors import ArtifactNotFoundError, MetadataError
from karinstall.core.models.coordinates import MavenCoordinate


class MockLocator(ArtifactLocator):
    """In-memory locator for testing."""

    def __init__(self, fail_metadata: bool = False):
        self._files: dict[str, Path] = {}
        self._fail_metadata = fail_metadata
        self._resolve_log: list[str] = []
        self._metadata_log: list[tuple[str, Path]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def resolve_log(self) -> list[str]:
        """Every coordinate or path passed to resolve/resolve_path, in order."""
        return self._resolve_log

    @property
    def metadata_log(self) -> list[tuple[str, Path]]:
        return self._metadata_log

    def resolve_count(self, coordinate: str) -> int:
        return Counter(self._resolve_log)[coordinate]

    def add(self, coordinate: str, file: Path) -> None:
        """Register the local file served for ``coordinate``."""
        self._files[MavenCoordinate.parse(coordinate).path] = file

    def resolve(self, coordinate: str) -> Path:
        self._resolve_log.append(coordinate)
        try:
            relative = self.path_from_maven(coordinate)
        except ValueError as e:
            raise ArtifactNotFoundError(coordinate) from e
        if relative not in self._files:
            raise ArtifactNotFoundError(coordinate)
        return self._files[relative]

    def resolve_path(self, relative_path: str) -> Path:
        self._resolve_log.append(relative_path)
        if relative_path not in self._files:
            raise ArtifactNotFoundError(relative_path)
        return self._files[relative_path]

    def generate_metadata(self, coordinate: str, target: Path) -> None:
        self._metadata_log.append((coordinate, target))
        if self._fail_metadata:
            raise MetadataError(f"[mock] metadata refused for {coordinate}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f"<metadata><!-- {coordinate} --></metadata>\n", encoding="utf-8")

    def reset(self) -> None:
        """Clear call logs (registered files are kept)."""
        self._resolve_log.clear()
        self._metadata_log.clear()
