"""
Resolution context — everything one install run shares.

The registries, manifests and system repository are threaded through
the resolvers explicitly instead of living on a long-lived object, so
each resolver can be exercised with a context built by hand.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from karinstall.adapters.base import ArtifactLocator
from karinstall.core.models.features import Feature
from karinstall.core.models.settings import InstallSettings
from karinstall.core.persistence.system_repository import SystemRepository
from karinstall.core.services.manifest import FeaturesConfig, StartupManifest
from karinstall.core.services.registry import FeatureRegistry, RepositoryRegistry


@dataclass
class InstallStats:
    """What a run changed on disk."""

    installed: list[str] = field(default_factory=list)
    metadata: list[str] = field(default_factory=list)
    skipped_bundles: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "installed": self.installed,
            "metadata": self.metadata,
            "skipped_bundles": self.skipped_bundles,
            "warnings": self.warnings,
        }


@dataclass
class ResolutionContext:
    """Mutable state of a single install run."""

    settings: InstallSettings
    locator: ArtifactLocator
    system: SystemRepository
    startup: StartupManifest
    features_config: FeaturesConfig
    repositories: RepositoryRegistry = field(default_factory=RepositoryRegistry)
    features: FeatureRegistry = field(default_factory=FeatureRegistry)
    stats: InstallStats = field(default_factory=InstallStats)

    # Features whose artifacts are all in place, and the chain being resolved
    completed: set[tuple[str, str]] = field(default_factory=set)
    resolving: list[Feature] = field(default_factory=list)

    @classmethod
    def create(cls, settings: InstallSettings, locator: ArtifactLocator) -> ResolutionContext:
        """Build a context for ``settings``. Manifests are not loaded yet."""
        return cls(
            settings=settings,
            locator=locator,
            system=SystemRepository(settings.system_dir),
            startup=StartupManifest(settings.startup_properties_file),
            features_config=FeaturesConfig(settings.features_cfg_file),
            features=FeatureRegistry(settings.feature_flag_policy),
        )

    def warn(self, message: str) -> None:
        self.stats.warnings.append(message)
