"""
Features descriptor parser — Karaf ``features.xml`` into FeatureRepository.

Parsing is namespace-agnostic: every schema version of the features
namespace (and none at all) is accepted, since only element and
attribute names matter here.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from karinstall.core.errors import DescriptorError
from karinstall.core.models.features import (
    DEFAULT_FEATURE_VERSION,
    Bundle,
    ConfigFile,
    Dependency,
    Feature,
    FeatureRepository,
)

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "features"


def _local(tag: str) -> str:
    """Strip the ``{namespace}`` part of an element tag."""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _start_level(value: str | None, where: str) -> int:
    if value is None or not value.strip():
        return 0
    try:
        level = int(value.strip())
    except ValueError as e:
        raise DescriptorError(f"{where}: invalid start-level {value!r}") from e
    if level < 0:
        raise DescriptorError(f"{where}: negative start-level {level}")
    return level


def is_features_descriptor(path: Path) -> bool:
    """True when ``path`` is an XML file whose root element is ``<features>``."""
    try:
        for _event, element in ET.iterparse(path, events=("start",)):
            return _local(element.tag) == ROOT_ELEMENT
    except (ET.ParseError, OSError):
        return False
    return False


def parse_features(path: Path, uri: str | None = None) -> FeatureRepository:
    """Parse a features descriptor file.

    Args:
        path: Local file holding the descriptor.
        uri: Identity of the repository (defaults to the file path).

    Raises:
        DescriptorError: If the file is not a well-formed descriptor.
    """
    uri = uri or str(path)
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise DescriptorError(f"Cannot parse features descriptor {uri}: {e}") from e
    except OSError as e:
        raise DescriptorError(f"Cannot read features descriptor {uri}: {e}") from e

    if _local(root.tag) != ROOT_ELEMENT:
        raise DescriptorError(
            f"{uri}: expected <{ROOT_ELEMENT}> root element, got <{_local(root.tag)}>"
        )

    repositories = tuple(_text(r) for r in _children(root, "repository") if _text(r))
    features = tuple(_parse_feature(f, uri) for f in _children(root, "feature"))

    repo = FeatureRepository(
        uri=uri,
        name=root.get("name", ""),
        repositories=repositories,
        features=features,
    )
    logger.debug(
        "Parsed %s: %d features, %d nested repositories",
        uri, len(features), len(repositories),
    )
    return repo


def _parse_feature(element: ET.Element, uri: str) -> Feature:
    name = (element.get("name") or "").strip()
    if not name:
        raise DescriptorError(f"{uri}: <feature> without a name attribute")
    version = (element.get("version") or DEFAULT_FEATURE_VERSION).strip()
    where = f"{uri}: feature {name}/{version}"

    bundles = []
    for b in _children(element, "bundle"):
        location = _text(b)
        if not location:
            raise DescriptorError(f"{where}: <bundle> without a location")
        bundles.append(Bundle(
            location=location,
            start_level=_start_level(b.get("start-level"), where),
            dependency=_flag(b.get("dependency")),
        ))

    config_files = []
    for c in _children(element, "configfile"):
        location = _text(c)
        if not location:
            raise DescriptorError(f"{where}: <configfile> without a location")
        config_files.append(ConfigFile(
            location=location,
            final_name=c.get("finalname", ""),
            override=_flag(c.get("override")),
        ))

    dependencies = []
    for d in _children(element, "feature"):
        dep_name = _text(d)
        if not dep_name:
            raise DescriptorError(f"{where}: <feature> dependency without a name")
        dependencies.append(Dependency(name=dep_name, version=d.get("version")))

    description = element.get("description", "")
    details = _children(element, "details")
    if not description and details:
        description = _text(details[0])

    return Feature(
        name=name,
        version=version,
        description=description,
        bundles=tuple(bundles),
        config_files=tuple(config_files),
        dependencies=tuple(dependencies),
    )
