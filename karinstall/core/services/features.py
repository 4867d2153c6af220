"""
Feature resolution — materialize a feature and its dependencies.

Dependencies are resolved depth-first before the feature itself, so
by the time a feature's bundles are copied every feature it needs is
already in the system repository. Resolution only copies artifacts;
tiering and manifest updates belong to the install use case.
"""

from __future__ import annotations

import logging

from karinstall.core.errors import CircularDependencyError
from karinstall.core.models.coordinates import is_mvn
from karinstall.core.models.features import Bundle, Feature
from karinstall.core.services.artifacts import (
    install_artifact,
    repository_path,
    strip_location_prefix,
)
from karinstall.core.services.context import ResolutionContext

logger = logging.getLogger(__name__)


def resolve_feature(feature: Feature, ctx: ResolutionContext) -> None:
    """Install a feature's dependencies, bundles and config files.

    Raises:
        CircularDependencyError: If the feature is reached again while
            one of its own dependencies is being resolved.
        InstallError: On any resolution or copy failure.
    """
    if feature.key in ctx.completed:
        return
    if feature in ctx.resolving:
        chain = [f.label for f in ctx.resolving[ctx.resolving.index(feature):]]
        raise CircularDependencyError([*chain, feature.label])

    ctx.resolving.append(feature)
    try:
        for dependency in feature.dependencies:
            matches = ctx.features.find(dependency)
            if not matches:
                logger.warning(
                    "Feature %s depends on %s, which no resolved repository provides",
                    feature.label, dependency.name,
                )
                ctx.warn(f"{feature.label}: unknown dependency {dependency.name}")
            for dep_feature in matches:
                resolve_feature(dep_feature, ctx)

        logger.info("Resolving feature %s", feature.label)
        _install_bundles(feature, ctx)
        _install_config_files(feature, ctx)
    finally:
        ctx.resolving.pop()

    ctx.completed.add(feature.key)


def _install_bundles(feature: Feature, ctx: ResolutionContext) -> None:
    for bundle in feature.bundles:
        if bundle.dependency and not ctx.settings.ignore_dependency_flag:
            logger.warning(
                "Bundle %s is defined as dependency, so it's not installed", bundle.location
            )
            ctx.stats.skipped_bundles.append(bundle.location)
            continue
        logger.debug("Installing bundle %s", bundle.location)
        install_artifact(strip_location_prefix(bundle.location), ctx)


def _install_config_files(feature: Feature, ctx: ResolutionContext) -> None:
    for config_file in feature.config_files:
        logger.debug("Installing configuration file %s", config_file.location)
        install_artifact(config_file.location, ctx)


def bundle_start_level(bundle: Bundle, ctx: ResolutionContext) -> int:
    """Start level of a bundle, falling back to the configured default."""
    return bundle.start_level or ctx.settings.default_start_level


def startup_location(bundle: Bundle, ctx: ResolutionContext) -> str:
    """Key under which a bundle is listed in startup.properties."""
    location = strip_location_prefix(bundle.location)
    if is_mvn(location):
        return repository_path(location, ctx)
    return location
