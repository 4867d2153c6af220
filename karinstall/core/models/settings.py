"""
Install settings — every configuration input of an install run.

Loaded from assembly.yml by the config loader. Paths are stored as
given; ``resolve_paths`` anchors them to a base directory once the
location of the config file is known.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from karinstall.core.models.coordinates import MavenCoordinate, is_mvn

DEFAULT_START_LEVEL = 30
DEFAULT_WORK_DIRECTORY = "target/assembly"
DEFAULT_SYSTEM_DIRECTORY = "system"
DEFAULT_STARTUP_PROPERTIES = "etc/startup.properties"
DEFAULT_FEATURES_CFG = "etc/org.apache.karaf.features.cfg"

# Scopes whose kar / features artifacts take part in the assembly
INSTALL_SCOPES = ("compile", "runtime")


class FeatureFlagPolicy(str, Enum):
    """How a feature reached from several repositories keeps its startup flag."""

    LAST_WRITE = "last_write"  # the last repository walked decides
    ANY_TRUE = "any_true"      # startup if any repository asked for it


class ArtifactRef(BaseModel):
    """An input artifact handed to the installer by the build tool.

    Either ``mvn`` or the group/artifact/version triple must be set.
    ``file`` points at an already-resolved local copy; when absent the
    artifact locator is asked for it.
    """

    mvn: str | None = None
    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    type: str = "jar"
    classifier: str | None = None
    scope: str = "compile"
    file: Path | None = None

    @model_validator(mode="after")
    def _fill_from_mvn(self) -> ArtifactRef:
        if self.mvn:
            if not is_mvn(self.mvn):
                raise ValueError(f"mvn must start with 'mvn:', got {self.mvn!r}")
            coord = MavenCoordinate.parse(self.mvn)
            self.group_id = coord.group_id
            self.artifact_id = coord.artifact_id
            self.version = coord.version
            self.type = coord.type
            self.classifier = coord.classifier
        elif not (self.group_id and self.artifact_id and self.version):
            raise ValueError("artifact needs 'mvn' or group_id/artifact_id/version")
        return self

    @property
    def coordinate(self) -> MavenCoordinate:
        return MavenCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.type,
            classifier=self.classifier,
        )

    def to_mvn(self) -> str:
        return self.coordinate.to_mvn()

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.version}:{self.scope}"


class InstallSettings(BaseModel):
    """Configuration of an install run."""

    work_directory: Path = Path(DEFAULT_WORK_DIRECTORY)
    system_directory: Path | None = None
    startup_properties: Path = Path(DEFAULT_STARTUP_PROPERTIES)
    features_cfg: Path = Path(DEFAULT_FEATURES_CFG)

    default_start_level: int = DEFAULT_START_LEVEL

    startup_features: list[str] = Field(default_factory=list)
    boot_features: list[str] = Field(default_factory=list)
    installed_features: list[str] = Field(default_factory=list)

    ignore_dependency_flag: bool = True
    resolve_unlisted: bool = True
    feature_flag_policy: FeatureFlagPolicy = FeatureFlagPolicy.LAST_WRITE

    # Local Maven-layout repositories the locator searches, in order
    repositories: list[Path] = Field(
        default_factory=lambda: [Path("~/.m2/repository")]
    )

    dependencies: list[ArtifactRef] = Field(default_factory=list)

    @field_validator("default_start_level")
    @classmethod
    def _positive_level(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("default_start_level must be a positive integer")
        return v

    @property
    def system_dir(self) -> Path:
        if self.system_directory is not None:
            return self.system_directory
        return self.work_directory / DEFAULT_SYSTEM_DIRECTORY

    @property
    def startup_properties_file(self) -> Path:
        return self.work_directory / self.startup_properties

    @property
    def features_cfg_file(self) -> Path:
        return self.work_directory / self.features_cfg

    def resolve_paths(self, base_dir: Path) -> InstallSettings:
        """Return a copy whose relative paths are anchored at ``base_dir``."""

        def anchor(p: Path) -> Path:
            p = p.expanduser()
            return p if p.is_absolute() else (base_dir / p)

        deps = [
            d.model_copy(update={"file": anchor(d.file)}) if d.file else d
            for d in self.dependencies
        ]
        return self.model_copy(update={
            "work_directory": anchor(self.work_directory),
            "system_directory": anchor(self.system_directory) if self.system_directory else None,
            "repositories": [anchor(r) for r in self.repositories],
            "dependencies": deps,
        })
