"""
Inspect use case — summarize a features descriptor without installing anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from karinstall.core.errors import DescriptorError
from karinstall.core.models.features import FeatureRepository
from karinstall.core.services.descriptor import parse_features


@dataclass
class InspectResult:
    """Parsed descriptor, or the reason it could not be parsed."""

    repository: FeatureRepository | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.repository is not None
        repo = self.repository
        return {
            "uri": repo.uri,
            "name": repo.name,
            "repositories": list(repo.repositories),
            "features": [
                {
                    "name": f.name,
                    "version": f.version,
                    "bundles": [b.location for b in f.bundles],
                    "config_files": [c.location for c in f.config_files],
                    "dependencies": [d.name for d in f.dependencies],
                }
                for f in repo.features
            ],
        }


def inspect_descriptor(path: Path) -> InspectResult:
    """Parse ``path`` as a features descriptor."""
    try:
        return InspectResult(repository=parse_features(path))
    except DescriptorError as e:
        return InspectResult(error=str(e))
