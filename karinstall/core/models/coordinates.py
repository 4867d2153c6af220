"""
Maven coordinates — parsing ``mvn:`` URLs into repository paths.

A coordinate looks like::

    mvn:groupId/artifactId/version[/type[/classifier]]

optionally preceded by a repository URL terminated with ``!``
(``mvn:http://repo.example.org@id=central!org.sample/core/1.0``).
The canonical repository-relative path is the standard Maven layout,
which is also the layout of the assembled system directory.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

MVN_PREFIX = "mvn:"
DEFAULT_TYPE = "jar"
SNAPSHOT_SUFFIX = "SNAPSHOT"


class MavenCoordinate(BaseModel):
    """A parsed Maven artifact coordinate."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version: str
    type: str = DEFAULT_TYPE
    classifier: str | None = None

    @classmethod
    def parse(cls, url: str) -> MavenCoordinate:
        """Parse an ``mvn:`` URL.

        Raises:
            ValueError: If the URL is not a well-formed mvn coordinate.
        """
        if not url.startswith(MVN_PREFIX):
            raise ValueError(f"Not an mvn coordinate: {url!r}")
        body = url[len(MVN_PREFIX):]
        if "!" in body:
            body = body.rsplit("!", 1)[1]

        parts = body.split("/")
        if len(parts) < 3 or len(parts) > 5 or not all(parts[:3]):
            raise ValueError(
                f"Invalid mvn coordinate {url!r}: expected "
                "mvn:groupId/artifactId/version[/type[/classifier]]"
            )

        group_id, artifact_id, version = parts[0], parts[1], parts[2]
        type_ = parts[3] if len(parts) > 3 and parts[3] else DEFAULT_TYPE
        classifier = parts[4] if len(parts) > 4 and parts[4] else None
        return cls(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            type=type_,
            classifier=classifier,
        )

    @classmethod
    def from_path(cls, path: str) -> MavenCoordinate | None:
        """Recover the coordinate behind a Maven-layout path, None if it is not one."""
        parts = path.strip("/").split("/")
        if len(parts) < 4 or not all(parts):
            return None
        *group, artifact_id, version, file_name = parts
        stem = f"{artifact_id}-{version}"
        if not file_name.startswith(stem) or "." not in file_name[len(stem):]:
            return None
        head, type_ = file_name[len(stem):].rsplit(".", 1)
        if head and not head.startswith("-"):
            return None
        coord = cls(
            group_id=".".join(group),
            artifact_id=artifact_id,
            version=version,
            type=type_ or DEFAULT_TYPE,
            classifier=head[1:] or None,
        )
        return coord if coord.path == "/".join(parts) else None

    @property
    def is_snapshot(self) -> bool:
        return self.version.endswith(SNAPSHOT_SUFFIX)

    @property
    def file_name(self) -> str:
        name = f"{self.artifact_id}-{self.version}"
        if self.classifier:
            name += f"-{self.classifier}"
        return f"{name}.{self.type}"

    @property
    def directory(self) -> str:
        """Repository-relative directory holding the artifact."""
        return "/".join([*self.group_id.split("."), self.artifact_id, self.version])

    @property
    def path(self) -> str:
        """Canonical repository-relative path (always ``/``-separated)."""
        return f"{self.directory}/{self.file_name}"

    def to_mvn(self) -> str:
        """Render back to an ``mvn:`` URL, omitting defaulted trailing parts."""
        parts = [self.group_id, self.artifact_id, self.version]
        if self.classifier:
            parts += [self.type, self.classifier]
        elif self.type != DEFAULT_TYPE:
            parts.append(self.type)
        return MVN_PREFIX + "/".join(parts)

    def __str__(self) -> str:
        return self.to_mvn()


def is_mvn(location: str) -> bool:
    """True when a location is an ``mvn:`` URL."""
    return location.startswith(MVN_PREFIX)
