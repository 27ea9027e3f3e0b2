"""
Mirror cache infrastructure for spex.

Keeps one bare mirror per remote repository under a cache root:

    {root}/{host}/{namespace}/{name}.git

The path is a pure function of the identifier, so every operation on the
same package reuses the same mirror. Mirrors are created on first use and
refreshed in place afterwards; this module never deletes or moves them.

There is no locking: two processes working on the same mirror race.
"""

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from ..domain.package import PackageIdentifier
from ..exit_codes import RemoteOperationError
from .git_client import GitClient, GitCommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedMirror:
    """A mirror that is present and up to date."""
    identifier: PackageIdentifier
    path: Path
    created: bool = False


class MirrorCache:
    """
    Cache of bare repository mirrors.

    Example:
        cache = MirrorCache(Path("~/.cache/spex/packages").expanduser())
        mirror = cache.ensure_mirror(parse_package_id("myorg/adr-node"))
        print(mirror.path)
    """

    def __init__(self, root: Path, git: Optional[GitClient] = None):
        """
        Initialize MirrorCache.

        Args:
            root: Cache root directory (created on demand)
            git: Git client (default: GitClient())
        """
        self.root = Path(root)
        self.git = git or GitClient()

    def mirror_path(self, identifier: PackageIdentifier) -> Path:
        """Location of the mirror for ``identifier``."""
        return self.root / identifier.host / identifier.namespace / f"{identifier.name}.git"

    def ensure_mirror(self, identifier: PackageIdentifier, cwd: Optional[Path] = None) -> CachedMirror:
        """
        Create the mirror if it is missing, otherwise refresh it.

        A refresh first resets the ``origin`` URL to the identifier's clone
        URL, then fetches all refs with pruning.

        Raises:
            RemoteOperationError: If git fails; carries git's output
        """
        path = self.mirror_path(identifier)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            if not path.exists():
                self._clone_into_place(identifier, path, cwd)
                logger.info(f"Mirrored {identifier.clone_url} -> {path}")
                return CachedMirror(identifier=identifier, path=path, created=True)

            self.git.set_remote_url(path, identifier.clone_url)
            self.git.fetch_prune(path)
            logger.info(f"Updated mirror {path}")
            return CachedMirror(identifier=identifier, path=path, created=False)

        except GitCommandError as e:
            raise RemoteOperationError(
                f"Failed to update package mirror for {identifier.clone_url}.",
                clone_url=identifier.clone_url,
                details=e.details,
            ) from e
        except OSError as e:
            raise RemoteOperationError(
                f"Failed to prepare package mirror for {identifier.clone_url}: {e}",
                clone_url=identifier.clone_url,
            ) from e

    def _clone_into_place(self, identifier: PackageIdentifier, path: Path, cwd: Optional[Path]) -> None:
        """Clone next to the final location, then rename into place."""
        staging = Path(tempfile.mkdtemp(dir=path.parent, prefix=f".{path.name}."))
        try:
            staged_mirror = staging / path.name
            self.git.clone_mirror(identifier.clone_url, staged_mirror, cwd=cwd)
            os.replace(staged_mirror, path)
        finally:
            shutil.rmtree(staging, ignore_errors=True)
