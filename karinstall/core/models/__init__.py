"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from karinstall.core.models import Feature, FeatureRepository, InstallSettings
"""

from karinstall.core.models.coordinates import MavenCoordinate
from karinstall.core.models.features import (
    Bundle,
    ConfigFile,
    Dependency,
    Feature,
    FeatureRepository,
    Tier,
)
from karinstall.core.models.settings import (
    ArtifactRef,
    FeatureFlagPolicy,
    InstallSettings,
)

__all__ = [
    # coordinates.py
    "MavenCoordinate",
    # features.py
    "Bundle",
    "ConfigFile",
    "Dependency",
    "Feature",
    "FeatureRepository",
    "Tier",
    # settings.py
    "ArtifactRef",
    "FeatureFlagPolicy",
    "InstallSettings",
]
