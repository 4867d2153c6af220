"""
Repository resolution — walk features repositories and their nested references.

Each repository URI is processed once per run no matter how many
inputs reach it: the descriptor is copied into the system repository,
parsed, its nested repositories are walked, and its features are
registered with the startup flag of the path that reached them.
"""

from __future__ import annotations

import logging

from karinstall.core.services.artifacts import install_artifact, locate
from karinstall.core.services.context import ResolutionContext
from karinstall.core.services.descriptor import parse_features

logger = logging.getLogger(__name__)


def resolve_repository(
    uri: str,
    ctx: ResolutionContext,
    primary: bool = True,
    wants_startup: bool = False,
) -> None:
    """Resolve a features repository and everything it references.

    Args:
        uri: Repository location (``mvn:`` coordinate or file path).
        ctx: Run context.
        primary: True for repositories given as inputs; only those are
            listed in ``featuresRepositories``.
        wants_startup: Whether features found here default to the startup tier.

    Raises:
        InstallError: On any resolution, copy or parse failure.
    """
    if uri in ctx.repositories:
        logger.debug("Repository %s already resolved", uri)
        return
    ctx.repositories.add(uri)
    logger.info("Resolving features repository %s", uri)

    if primary:
        ctx.features_config.add_repository(uri)

    install_artifact(uri, ctx)
    source, _relative = locate(uri, ctx)
    repository = parse_features(source, uri)

    for nested in repository.repositories:
        resolve_repository(nested, ctx, primary=False, wants_startup=wants_startup)

    for feature in repository.features:
        ctx.features.register(feature, wants_startup)
