"""
Kar extraction — unpack a Karaf archive into the assembly.

A kar is a zip file laid out as::

    META-INF/MANIFEST.MF     optional Karaf-Feature-Repos header
    repository/...           Maven-layout artifacts → system directory
    resources/...            plain files → work directory

Extraction never overwrites a file that is already in place.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from karinstall.core.errors import ResolutionError
from karinstall.core.services.descriptor import is_features_descriptor

logger = logging.getLogger(__name__)

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"
FEATURE_REPOS_HEADER = "Karaf-Feature-Repos"
REPOSITORY_PREFIX = "repository/"
RESOURCES_PREFIX = "resources/"


@dataclass
class KarContents:
    """What a kar brought into the assembly."""

    source: Path
    feature_repositories: list[str] = field(default_factory=list)
    extracted: list[Path] = field(default_factory=list)


def read_manifest(text: str) -> dict[str, str]:
    """Parse a jar manifest main section (continuation lines start with a space)."""
    headers: dict[str, str] = {}
    last: str | None = None
    for line in text.splitlines():
        if not line:
            break  # end of main section
        if line.startswith(" ") and last is not None:
            headers[last] += line[1:]
            continue
        if ":" in line:
            name, value = line.split(":", 1)
            last = name.strip()
            headers[last] = value.strip()
    return headers


def extract_kar(kar_file: Path, system_dir: Path, work_dir: Path) -> KarContents:
    """Extract a kar and list the features repositories it provides.

    Repositories come from the ``Karaf-Feature-Repos`` manifest header
    when present; otherwise every extracted ``repository/**.xml`` whose
    root element is ``<features>`` is one.

    Raises:
        ResolutionError: If the archive cannot be read or extracted.
    """
    contents = KarContents(source=kar_file)
    header_repos: list[str] | None = None
    scanned: list[Path] = []

    try:
        with zipfile.ZipFile(kar_file) as zf:
            for info in zf.infolist():
                name = info.filename
                if name == MANIFEST_ENTRY:
                    headers = read_manifest(_manifest_text(zf, info, kar_file))
                    if FEATURE_REPOS_HEADER in headers:
                        header_repos = [
                            r.strip() for r in headers[FEATURE_REPOS_HEADER].split(",") if r.strip()
                        ]
                    continue
                if info.is_dir():
                    continue

                if name.startswith(REPOSITORY_PREFIX):
                    target = _target(system_dir, name[len(REPOSITORY_PREFIX):], kar_file)
                elif name.startswith(RESOURCES_PREFIX):
                    target = _target(work_dir, name[len(RESOURCES_PREFIX):], kar_file)
                else:
                    continue

                if _extract_member(zf, info, target):
                    contents.extracted.append(target)
                if name.startswith(REPOSITORY_PREFIX) and name.endswith(".xml"):
                    scanned.append(target)
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, OSError) as e:
        raise ResolutionError(f"Can not extract kar {kar_file}: {e}") from e

    if header_repos is not None:
        contents.feature_repositories = header_repos
    else:
        contents.feature_repositories = [
            str(p) for p in scanned if is_features_descriptor(p)
        ]

    logger.info(
        "Extracted %d files from %s (%d features repositories)",
        len(contents.extracted), kar_file.name, len(contents.feature_repositories),
    )
    return contents


def _target(root: Path, relative: str, kar_file: Path) -> Path:
    rel = PurePosixPath(relative)
    if rel.is_absolute() or ".." in rel.parts:
        raise ResolutionError(f"Unsafe entry {relative!r} in kar {kar_file}")
    return root.joinpath(*rel.parts)


def _extract_member(zf: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> bool:
    """Write one archive member unless ``target`` exists. Returns True if written."""
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        with zf.open(info) as src, open(target, "xb") as dst:
            shutil.copyfileobj(src, dst)
    except FileExistsError:
        logger.debug("Keeping existing %s", target)
        return False
    return True


def _manifest_text(zf: zipfile.ZipFile, info: zipfile.ZipInfo, kar_file: Path) -> str:
    try:
        return zf.read(info).decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResolutionError(f"Malformed {MANIFEST_ENTRY} in kar {kar_file}: {e}") from e
