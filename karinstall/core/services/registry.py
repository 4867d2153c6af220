"""
Run-scoped registries — which repositories were walked, which features were found.

Both live for a single install run and are owned by its
ResolutionContext. Nothing here is persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from karinstall.core.models.features import Dependency, Feature
from karinstall.core.models.settings import FeatureFlagPolicy

logger = logging.getLogger(__name__)


class RepositoryRegistry:
    """Repository URIs already processed in this run, in visit order."""

    def __init__(self) -> None:
        self._seen: dict[str, None] = {}

    def __contains__(self, uri: object) -> bool:
        return uri in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def add(self, uri: str) -> bool:
        """Record ``uri``. Returns False if it was already recorded."""
        if uri in self._seen:
            return False
        self._seen[uri] = None
        return True

    def uris(self) -> list[str]:
        return list(self._seen)


class FeatureRegistry:
    """Features discovered while walking repositories, with their startup flag.

    Iteration follows discovery order. When a feature identity is
    registered again, the flag is merged according to ``policy``:
    ``last_write`` keeps the newest flag, ``any_true`` keeps True once set.
    """

    def __init__(self, policy: FeatureFlagPolicy = FeatureFlagPolicy.LAST_WRITE):
        self.policy = policy
        self._features: dict[Feature, bool] = {}

    def __contains__(self, feature: object) -> bool:
        return feature in self._features

    def __iter__(self) -> Iterator[Feature]:
        return iter(list(self._features))

    def __len__(self) -> int:
        return len(self._features)

    def register(self, feature: Feature, wants_startup: bool) -> None:
        previous = self._features.get(feature)
        if previous is not None and previous != wants_startup:
            logger.debug(
                "Feature %s registered again with startup=%s (was %s, policy=%s)",
                feature.label, wants_startup, previous, self.policy.value,
            )
        if previous is not None and self.policy is FeatureFlagPolicy.ANY_TRUE:
            wants_startup = previous or wants_startup
        self._features[feature] = wants_startup

    def wants_startup(self, feature: Feature) -> bool:
        return self._features.get(feature, False)

    def find(self, dependency: Dependency) -> list[Feature]:
        """Registered features a dependency reference points at.

        Features are matched by name. When some of them satisfy the
        requested version or range only those are returned; otherwise
        every feature of that name is.
        """
        named = [f for f in self._features if dependency.matches(f)]
        fitting = [f for f in named if dependency.accepts(f.version)]
        if named and not fitting:
            logger.debug(
                "No %s feature fits version %s, using all registered versions",
                dependency.name, dependency.version,
            )
        return fitting or named
