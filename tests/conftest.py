"""
Shared test fixtures and configuration.

Most tests build a throwaway Maven-layout repository under ``tmp_path``
(the ``m2`` fixture), publish artifacts into it, and assemble into
``tmp_path / "assembly"``.
"""

import logging
import textwrap
import zipfile
from pathlib import Path

import pytest

from karinstall.adapters.maven import LocalRepositoryLocator
from karinstall.core.models.coordinates import MavenCoordinate
from karinstall.core.models.settings import InstallSettings
from karinstall.core.services.context import ResolutionContext


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo setup_logging so caplog sees records in every test."""
    yield
    logger = logging.getLogger("karinstall")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def m2(tmp_path: Path) -> Path:
    """Return an empty local Maven repository."""
    repo = tmp_path / "m2"
    repo.mkdir()
    return repo


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Return the assembly work directory (not created)."""
    return tmp_path / "assembly"


@pytest.fixture
def publish(m2: Path):
    """Factory: write an artifact into the local repository at its Maven path."""

    def _publish(coordinate: str, content: str | None = None) -> Path:
        path = m2 / MavenCoordinate.parse(coordinate).path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content if content is not None else f"artifact {coordinate}\n")
        return path

    return _publish


@pytest.fixture
def publish_features(publish):
    """Factory: publish a features descriptor given its inner XML."""

    def _publish_features(coordinate: str, body: str, name: str = "test") -> Path:
        xml = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<features name="{name}" xmlns="http://karaf.apache.org/xmlns/features/v1.2.0">\n'
            f"{textwrap.dedent(body)}"
            "</features>\n"
        )
        return publish(coordinate, xml)

    return _publish_features


@pytest.fixture
def make_settings(work_dir: Path, m2: Path):
    """Factory: InstallSettings pointing at the temp assembly and repository."""

    def _make_settings(**overrides) -> InstallSettings:
        values = {"work_directory": work_dir, "repositories": [m2]}
        values.update(overrides)
        return InstallSettings(**values)

    return _make_settings


@pytest.fixture
def make_context(make_settings, m2: Path):
    """Factory: a ready-to-use ResolutionContext with manifests loaded."""

    def _make_context(settings: InstallSettings | None = None, locator=None) -> ResolutionContext:
        settings = settings or make_settings()
        ctx = ResolutionContext.create(settings, locator or LocalRepositoryLocator([m2]))
        ctx.system.ensure()
        ctx.startup.load()
        ctx.features_config.load()
        return ctx

    return _make_context


@pytest.fixture
def make_kar(tmp_path: Path):
    """Factory: build a kar archive from {entry name: text} pairs."""

    def _make_kar(name: str, entries: dict[str, str]) -> Path:
        path = tmp_path / "kars" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as zf:
            for entry, text in entries.items():
                zf.writestr(entry, text)
        return path

    return _make_kar


def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Map every file under ``root`` to its content."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def tree():
    """Expose snapshot_tree to tests."""
    return snapshot_tree
