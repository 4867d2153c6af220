"""
Install use case — assemble the runtime image from kars and features repositories.

This is the top-level orchestrator: it loads prior manifest state,
walks every input artifact, classifies each discovered feature into a
tier, materializes it, and persists the manifests.

Flow:
    load manifests → inputs (kar / features) → repositories → classify
    → resolve features → restore startup bundles → save manifests
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from karinstall.adapters.base import ArtifactLocator
from karinstall.adapters.maven import LocalRepositoryLocator
from karinstall.core.config.loader import ConfigError, load_settings
from karinstall.core.errors import InstallError
from karinstall.core.models.features import Feature, Tier
from karinstall.core.models.settings import INSTALL_SCOPES, ArtifactRef, InstallSettings
from karinstall.core.services.artifacts import install_artifact
from karinstall.core.services.context import InstallStats, ResolutionContext
from karinstall.core.services.features import (
    bundle_start_level,
    resolve_feature,
    startup_location,
)
from karinstall.core.services.kar import extract_kar
from karinstall.core.services.repositories import resolve_repository

logger = logging.getLogger(__name__)

FEATURES_CLASSIFIER = "features"
KAR_TYPE = "kar"


@dataclass
class InstallResult:
    """Result of an install run."""

    settings: InstallSettings | None = None
    repositories: list[str] = field(default_factory=list)
    tiers: dict[str, list[str]] = field(default_factory=dict)
    stats: InstallStats | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def features_in(self, tier: Tier) -> list[str]:
        return self.tiers.get(tier.value, [])

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.settings:
            result["system_directory"] = str(self.settings.system_dir)
            result["startup_properties"] = str(self.settings.startup_properties_file)
        result["repositories"] = self.repositories
        result["features"] = self.tiers
        if self.stats:
            result.update(self.stats.to_dict())
        return result


def classify(feature: Feature, ctx: ResolutionContext) -> Tier:
    """Decide the tier of a feature. The first matching rule wins."""
    settings = ctx.settings
    if ctx.features.wants_startup(feature) or feature.name in settings.startup_features:
        return Tier.STARTUP
    if feature.name in settings.boot_features:
        return Tier.BOOT
    if feature.name in settings.installed_features:
        return Tier.INSTALLED
    return Tier.UNLISTED


def install_kars(
    settings: InstallSettings | None = None,
    config_path: Path | None = None,
    locator: ArtifactLocator | None = None,
) -> InstallResult:
    """Run the installer.

    Args:
        settings: Pre-built settings. If None, loaded from ``config_path``.
        config_path: Optional explicit path to assembly.yml.
        locator: Artifact locator. Defaults to the local Maven repositories
            listed in the settings.

    Returns:
        InstallResult. On failure ``error`` is set and the manifests
        are left as the last successful write put them.
    """
    result = InstallResult()

    # ── Load settings ────────────────────────────────────────────
    if settings is None:
        try:
            settings = load_settings(config_path)
        except ConfigError as e:
            result.error = str(e)
            return result
    result.settings = settings

    if locator is None:
        locator = LocalRepositoryLocator(settings.repositories)

    ctx = ResolutionContext.create(settings, locator)
    result.stats = ctx.stats

    try:
        run_install(ctx, result)
    except InstallError as e:
        logger.error("Install failed: %s", e)
        result.error = str(e)

    result.repositories = ctx.repositories.uris()
    return result


def run_install(ctx: ResolutionContext, result: InstallResult) -> None:
    """Execute every stage against an existing context.

    Raises:
        InstallError: On the first fatal failure.
    """
    logger.info("Creating system directory %s", ctx.system.root)
    ctx.system.ensure()
    ctx.startup.load()
    ctx.features_config.load()

    # ── Inputs ───────────────────────────────────────────────────
    logger.info("Loading kar and features dependencies in compile and runtime scopes")
    for artifact in ctx.settings.dependencies:
        process_input(artifact, ctx)

    # ── Features ─────────────────────────────────────────────────
    for feature in ctx.features:
        tier = classify(feature, ctx)
        result.tiers.setdefault(tier.value, []).append(feature.label)
        try:
            install_feature(feature, tier, ctx)
        except InstallError as e:
            raise InstallError(f"Can not install {feature.label} feature: {e}") from e

    # ── Startup bundles missing from the system repository ──────
    logger.info("Installing bundles defined in startup.properties in the system")
    for location in ctx.startup.locations():
        install_artifact(location, ctx)

    ctx.startup.save()
    ctx.features_config.save()


def process_input(artifact: ArtifactRef, ctx: ResolutionContext) -> None:
    """Feed one build input into repository resolution.

    Kars are extracted and their repositories resolved; ``features``
    classified artifacts are resolved as repositories directly. Inputs
    outside the compile and runtime scopes are ignored. A scope other
    than runtime puts the features it brings in the startup tier.
    """
    if artifact.scope not in INSTALL_SCOPES:
        logger.debug("Ignoring %s (scope %s)", artifact, artifact.scope)
        return
    wants_startup = artifact.scope != "runtime"

    if artifact.type == KAR_TYPE:
        logger.info("Extracting %s kar", artifact)
        kar_file = artifact.file or ctx.locator.resolve(artifact.to_mvn())
        contents = extract_kar(kar_file, ctx.system.root, ctx.settings.work_directory)
        ctx.stats.installed.extend(
            p.relative_to(ctx.system.root).as_posix()
            for p in contents.extracted
            if p.is_relative_to(ctx.system.root)
        )
        for uri in contents.feature_repositories:
            resolve_repository(uri, ctx, primary=True, wants_startup=wants_startup)

    elif artifact.classifier == FEATURES_CLASSIFIER:
        logger.info("Resolving %s features repository", artifact)
        uri = artifact.to_mvn()
        if artifact.file is not None:
            relative = artifact.coordinate.path
            if ctx.system.install(artifact.file, relative):
                ctx.stats.installed.append(relative)
        resolve_repository(uri, ctx, primary=True, wants_startup=wants_startup)

    else:
        logger.debug("Ignoring %s (neither kar nor features)", artifact)


def install_feature(feature: Feature, tier: Tier, ctx: ResolutionContext) -> None:
    """Apply the side effects of ``tier`` and materialize the feature."""
    if tier is Tier.STARTUP:
        logger.info("Feature %s is defined as a startup feature", feature.label)
        for bundle in feature.bundles:
            ctx.startup.add_entry(
                startup_location(bundle, ctx), bundle_start_level(bundle, ctx), feature
            )
        resolve_feature(feature, ctx)
    elif tier is Tier.BOOT:
        logger.info("Feature %s is defined as a boot feature", feature.label)
        ctx.features_config.add_boot_feature(feature.name)
        resolve_feature(feature, ctx)
    elif tier is Tier.INSTALLED:
        logger.info("Feature %s is defined as an installed feature", feature.label)
        resolve_feature(feature, ctx)
    elif ctx.settings.resolve_unlisted:
        logger.debug("Feature %s is not listed, installing artifacts only", feature.label)
        resolve_feature(feature, ctx)
    else:
        logger.debug("Feature %s is not installed", feature.label)
