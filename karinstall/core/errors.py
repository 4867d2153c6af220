"""
Error taxonomy for an install run.

Every fatal failure derives from ``InstallError`` so the use case can
abort the run with a single ``except``. ``MetadataError`` is the one
recoverable kind: callers log it as a warning and keep going.
"""

from __future__ import annotations

from pathlib import Path


class InstallError(Exception):
    """Base class for failures that abort an install run."""


class DescriptorError(InstallError):
    """A features descriptor is malformed or misses a required attribute."""


class ResolutionError(InstallError):
    """A coordinate or location could not be turned into a local file."""


class ArtifactNotFoundError(ResolutionError):
    """The artifact locator has no file for a coordinate."""

    def __init__(self, coordinate: str, searched: list[Path] | None = None):
        self.coordinate = coordinate
        self.searched = searched or []
        where = ", ".join(str(p) for p in self.searched) or "no repositories"
        super().__init__(f"Artifact {coordinate} not found (searched: {where})")


class CircularDependencyError(ResolutionError):
    """A feature depends on itself, directly or transitively."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__("Circular feature dependency: " + " -> ".join(chain))


class ManifestError(InstallError):
    """A manifest or configuration file could not be read or written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"{path}: {reason}")


class MetadataError(Exception):
    """Snapshot side-car metadata could not be generated (non-fatal)."""
