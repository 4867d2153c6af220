"""
Tests for artifact locators — local Maven repositories and the mock.
"""

import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from pathlib import Path

import pytest

from karinstall.adapters.maven import LocalRepositoryLocator, render_snapshot_metadata
from karinstall.adapters.mock import MockLocator
from karinstall.core.errors import ArtifactNotFoundError, MetadataError
from karinstall.core.models.coordinates import MavenCoordinate

# ── Local repository locator ────────────────────────────────────────


class TestLocalRepositoryLocator:
    def test_resolve(self, m2: Path, publish):
        jar = publish("mvn:org.sample/core/1.0")
        locator = LocalRepositoryLocator([m2])
        assert locator.resolve("mvn:org.sample/core/1.0") == jar

    def test_first_repository_wins(self, tmp_path: Path):
        first, second = tmp_path / "one", tmp_path / "two"
        for repo in (first, second):
            jar = repo / "org/sample/core/1.0/core-1.0.jar"
            jar.parent.mkdir(parents=True)
            jar.write_text(repo.name)
        locator = LocalRepositoryLocator([first, second])
        assert locator.resolve("mvn:org.sample/core/1.0").read_text() == "one"

    def test_missing_names_searched_repositories(self, m2: Path):
        locator = LocalRepositoryLocator([m2])
        with pytest.raises(ArtifactNotFoundError) as exc:
            locator.resolve("mvn:org.sample/ghost/1.0")
        assert exc.value.searched == [m2]
        assert "mvn:org.sample/ghost/1.0" in str(exc.value)

    def test_malformed_coordinate_not_found(self, m2: Path):
        with pytest.raises(ArtifactNotFoundError):
            LocalRepositoryLocator([m2]).resolve("mvn:org.sample")

    def test_resolve_path(self, m2: Path, publish):
        xml = publish("mvn:org.sample/feat/1.0/xml/features", "<features/>")
        locator = LocalRepositoryLocator([m2])
        assert locator.resolve_path("org/sample/feat/1.0/feat-1.0-features.xml") == xml

    def test_layout_helpers(self, m2: Path):
        locator = LocalRepositoryLocator([m2])
        assert locator.path_from_maven("mvn:org.sample/web/2.0/war") == (
            "org/sample/web/2.0/web-2.0.war"
        )
        assert locator.is_snapshot("mvn:org.sample/web/2.0-SNAPSHOT")
        assert not locator.is_snapshot("mvn:org.sample/web/2.0")

    def test_generate_metadata(self, m2: Path, tmp_path: Path):
        target = tmp_path / "out" / "maven-metadata-local.xml"
        LocalRepositoryLocator([m2]).generate_metadata(
            "mvn:org.sample/core/1.0-SNAPSHOT", target
        )
        root = ET.fromstring(target.read_text())
        assert root.findtext("artifactId") == "core"
        assert root.findtext("versioning/snapshot/localCopy") == "true"

    def test_generate_metadata_bad_coordinate(self, m2: Path, tmp_path: Path):
        with pytest.raises(MetadataError):
            LocalRepositoryLocator([m2]).generate_metadata("mvn:broken", tmp_path / "m.xml")

    def test_repr(self, m2: Path):
        assert repr(LocalRepositoryLocator([m2])) == (
            "<LocalRepositoryLocator name='maven-local'>"
        )


class TestRenderSnapshotMetadata:
    def test_classifier_and_extension(self):
        coord = MavenCoordinate.parse("mvn:org.sample/feat/1.0-SNAPSHOT/xml/features")
        text = render_snapshot_metadata(coord, datetime(2024, 5, 1, 12, 30, tzinfo=UTC))
        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
        root = ET.fromstring(text.split("\n", 1)[1])
        entry = root.find("versioning/snapshotVersions/snapshotVersion")
        assert entry.findtext("classifier") == "features"
        assert entry.findtext("extension") == "xml"
        assert entry.findtext("updated") == "20240501123000"
        assert root.findtext("versioning/lastUpdated") == "20240501123000"

    def test_no_classifier(self):
        coord = MavenCoordinate.parse("mvn:org.sample/core/1.0-SNAPSHOT")
        text = render_snapshot_metadata(coord, datetime(2024, 5, 1, tzinfo=UTC))
        assert "<classifier>" not in text


# ── Mock locator ────────────────────────────────────────────────────


class TestMockLocator:
    def test_serves_registered_files(self, tmp_path: Path):
        jar = tmp_path / "core.jar"
        jar.write_text("x")
        mock = MockLocator()
        mock.add("mvn:org.sample/core/1.0", jar)
        assert mock.resolve("mvn:org.sample/core/1.0") == jar
        assert mock.resolve_path("org/sample/core/1.0/core-1.0.jar") == jar

    def test_records_calls(self, tmp_path: Path):
        mock = MockLocator()
        mock.add("mvn:org.sample/core/1.0", tmp_path / "core.jar")
        mock.resolve("mvn:org.sample/core/1.0")
        mock.resolve("mvn:org.sample/core/1.0")
        assert mock.resolve_count("mvn:org.sample/core/1.0") == 2
        mock.reset()
        assert mock.resolve_log == []

    def test_unknown_raises(self):
        with pytest.raises(ArtifactNotFoundError):
            MockLocator().resolve("mvn:org.sample/ghost/1.0")

    def test_metadata_failure(self, tmp_path: Path):
        mock = MockLocator(fail_metadata=True)
        with pytest.raises(MetadataError):
            mock.generate_metadata("mvn:g/a/1.0-SNAPSHOT", tmp_path / "m.xml")
        assert mock.metadata_log == [("mvn:g/a/1.0-SNAPSHOT", tmp_path / "m.xml")]
