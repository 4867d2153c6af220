"""
Artifact materialization — from a bundle location to a file in the system repository.

Locations come in three shapes:

    mvn:group/artifact/version[/type[/classifier]]
        resolved through the artifact locator, installed at the
        Maven-layout path.
    file:/abs/path.jar or a plain filesystem path
        used as is; installed at its path relative to the system
        repository when it already lives there, else at its file name.
    anything else (http:, ...)
        rejected.

Wrapping handlers (``wrap:``, ``war:``, ...) are stripped first.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from karinstall.adapters.base import METADATA_FILE_NAME
from karinstall.core.errors import MetadataError, ResolutionError
from karinstall.core.models.coordinates import MavenCoordinate, is_mvn
from karinstall.core.services.context import ResolutionContext

logger = logging.getLogger(__name__)

# Handler prefixes, applied in this order, each at most once.
# The second element cuts handler-specific trailing options.
LOCATION_PREFIXES: tuple[tuple[str, str | None], ...] = (
    ("wrap:", "$"),        # wrap:mvn:g/a/v$Bundle-SymbolicName=...
    ("blueprint:", None),
    ("webbundle:", "?"),   # webbundle:mvn:g/a/v/war?Web-ContextPath=/x
    ("war:", "?"),
)


def strip_location_prefix(location: str) -> str:
    """Remove known handler prefixes and their options from a bundle location."""
    for prefix, options_sep in LOCATION_PREFIXES:
        if location.startswith(prefix):
            location = location[len(prefix):]
            if options_sep and options_sep in location:
                location = location.split(options_sep, 1)[0]
    return location


def _local_file(location: str) -> Path | None:
    """The filesystem path behind a ``file:`` URL or bare path, else None."""
    if location.startswith("file:"):
        return Path(unquote(urlparse(location).path))
    scheme = urlparse(location).scheme
    # One-letter schemes are Windows drive letters
    if scheme and len(scheme) > 1:
        return None
    return Path(location)


def repository_path(location: str, ctx: ResolutionContext) -> str:
    """Canonical system-repository path of a (prefix-stripped) location.

    Raises:
        ResolutionError: If the location has an unsupported scheme.
    """
    if is_mvn(location):
        try:
            return ctx.locator.path_from_maven(location)
        except ValueError as e:
            raise ResolutionError(str(e)) from e

    path = _local_file(location)
    if path is None:
        raise ResolutionError(f"Unsupported artifact location: {location}")
    if path.is_absolute():
        try:
            return path.resolve().relative_to(ctx.system.root.resolve()).as_posix()
        except ValueError:
            return path.name
    return path.as_posix()


def locate(location: str, ctx: ResolutionContext) -> tuple[Path, str]:
    """Find the local file for a location and its canonical repository path.

    A file already present in the system repository is used directly;
    kar archives put their artifacts there before any feature resolves.

    Raises:
        ResolutionError: If no file can be found.
    """
    relative = repository_path(location, ctx)
    in_system = ctx.system.path_for(relative)
    if in_system.is_file():
        return in_system, relative

    if is_mvn(location):
        return ctx.locator.resolve(location), relative

    path = _local_file(location)
    assert path is not None  # repository_path rejected other schemes
    if not path.is_absolute():
        return ctx.locator.resolve_path(relative), relative
    if not path.is_file():
        raise ResolutionError(f"Artifact file not found: {location}")
    return path, relative


def install_artifact(location: str, ctx: ResolutionContext) -> str:
    """Resolve ``location`` and copy it into the system repository.

    Returns:
        The canonical repository-relative path of the artifact.
    """
    source, relative = locate(location, ctx)
    if ctx.system.install(source, relative):
        ctx.stats.installed.append(relative)
    coordinate = location if is_mvn(location) else _coordinate_at(relative)
    if coordinate is not None and ctx.locator.is_snapshot(coordinate):
        write_snapshot_metadata(coordinate, relative, ctx)
    return relative


def _coordinate_at(relative: str) -> str | None:
    """The ``mvn:`` coordinate a Maven-layout repository path stands for, if any."""
    coord = MavenCoordinate.from_path(relative)
    return coord.to_mvn() if coord is not None else None


def write_snapshot_metadata(coordinate: str, relative: str, ctx: ResolutionContext) -> None:
    """Generate the snapshot side-car next to an artifact, once.

    Failures are logged and the run goes on.
    """
    target = ctx.system.path_for(relative).parent / METADATA_FILE_NAME
    if target.exists():
        return
    try:
        ctx.locator.generate_metadata(coordinate, target)
    except MetadataError as e:
        logger.warning("Could not create %s for %s: %s", METADATA_FILE_NAME, coordinate, e)
        logger.warning(
            "This SNAPSHOT could be overwritten by an older one present on remote repositories"
        )
        ctx.warn(f"Could not create {METADATA_FILE_NAME} for {coordinate}: {e}")
        return
    ctx.stats.metadata.append(target.relative_to(ctx.system.root).as_posix())
