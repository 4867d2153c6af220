"""
System repository — the on-disk artifact tree of the assembled image.

Artifacts land at their canonical Maven-layout path. The tree is
write-once per path: a file that already exists is never overwritten,
which is what makes repeated runs against the same target idempotent.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path, PurePosixPath

from karinstall.core.errors import ManifestError, ResolutionError

logger = logging.getLogger(__name__)


class SystemRepository:
    """Write-once artifact tree rooted at ``root``."""

    def __init__(self, root: Path):
        self.root = root

    def ensure(self) -> None:
        """Create the root directory if needed."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, relative_path: str) -> Path:
        """Absolute path of a canonical repository-relative path.

        Raises:
            ResolutionError: If the path escapes the repository root.
        """
        rel = PurePosixPath(relative_path.lstrip("/"))
        if ".." in rel.parts:
            raise ResolutionError(f"Path escapes the system repository: {relative_path!r}")
        return self.root.joinpath(*rel.parts)

    def contains(self, relative_path: str) -> bool:
        return self.path_for(relative_path).exists()

    def install(self, source: Path, relative_path: str) -> bool:
        """Copy ``source`` to its canonical path unless a file is already there.

        The copy is staged in a temp file beside the target and published
        with a hard link, which fails instead of overwriting when another
        writer got there first.

        Returns:
            True if the file was copied, False if it already existed.

        Raises:
            ManifestError: If the copy fails for any other reason.
        """
        target = self.path_for(relative_path)
        if target.exists():
            logger.debug("Already in system repository: %s", relative_path)
            return False

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            _fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=".copy_", suffix=".tmp")
            os.close(_fd)
            tmp = Path(tmp_path)
            try:
                shutil.copyfile(source, tmp)
                try:
                    os.link(tmp, target)
                except FileExistsError:
                    logger.debug("Lost copy race for %s, keeping existing file", relative_path)
                    return False
            finally:
                tmp.unlink(missing_ok=True)
        except OSError as e:
            raise ManifestError(target, f"cannot copy {source}: {e}") from e

        logger.info("Installed %s", relative_path)
        return True
