"""
Import service for spex.

Materializes a package's ``spex/`` directory into a project, leaving out
whatever the package itself excludes through ``export.ignores``.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator, List, Optional

from ..config import SPECIFICATION_ROOT_NAME
from ..domain import event as events
from ..domain.event import Event
from ..domain.package import ImportedPackage, PackageIdentifier
from ..exit_codes import CatalogFormatError, MissingRemoteContentError, RemoteOperationError
from ..ignore import IgnoreMatcher, compile_patterns
from ..infra.git_client import GitClient, GitCommandError
from ..infra.mirror_cache import CachedMirror, MirrorCache
from .build_file import BuildFile

logger = logging.getLogger(__name__)


def mirror_event(mirror: CachedMirror) -> Event:
    """Progress event describing what ensure_mirror did."""
    return Event(
        events.MIRROR_CLONED if mirror.created else events.MIRROR_UPDATED,
        {
            'package_id': mirror.identifier.raw,
            'source_url': mirror.identifier.clone_url,
            'path': str(mirror.path),
        },
    )


def _ignore_callback(source_root: Path, matcher: IgnoreMatcher) -> Callable[[str, List[str]], List[str]]:
    """Build a shutil.copytree ``ignore`` callable for one source tree."""

    def ignore_patterns(directory: str, names: List[str]) -> List[str]:
        """Return entries to skip during copy."""
        ignored = []
        for name in names:
            entry = Path(directory) / name
            relative = entry.relative_to(source_root).as_posix()
            if entry.is_symlink():
                logger.debug(f"Skipping symlink {relative}")
                ignored.append(name)
            elif entry.is_dir():
                if matcher.matches_directory(relative):
                    ignored.append(name)
            elif matcher.matches_file(relative):
                ignored.append(name)
        return ignored

    return ignore_patterns


class ImportService:
    """
    Service for importing one package into a target directory.

    Example:
        service = ImportService(MirrorCache(cache_root))
        identifier = parse_package_id("myorg/adr-node")

        for event in service.import_package(identifier, target):
            print(event)

        imported = service.last_result
    """

    def __init__(
        self,
        cache: MirrorCache,
        git: Optional[GitClient] = None,
        specification_root: str = SPECIFICATION_ROOT_NAME,
    ):
        """
        Initialize ImportService.

        Args:
            cache: Mirror cache used to resolve packages
            git: Git client for checkouts (default: the cache's client)
            specification_root: Directory exported by every package
        """
        self.cache = cache
        self.git = git or cache.git
        self.specification_root = specification_root
        self.last_result: Optional[ImportedPackage] = None

    def import_package(
        self,
        identifier: PackageIdentifier,
        target_path: Path,
        cwd: Optional[Path] = None,
    ) -> Generator[Event, None, ImportedPackage]:
        """
        Replace ``target_path`` with the filtered specification tree of
        ``identifier``.

        Yields a mirror event, returns ImportedPackage.

        Raises:
            MissingRemoteContentError: The package has no specification root;
                ``target_path`` is left untouched
            RemoteOperationError: Mirror, checkout or copy failure, or a
                specification root that is a symbolic link
        """
        self.last_result = None
        target_path = Path(target_path)

        mirror = self.cache.ensure_mirror(identifier, cwd)
        yield mirror_event(mirror)

        with tempfile.TemporaryDirectory(prefix="spex-import-") as temporary:
            checkout_path = Path(temporary) / "repo"
            try:
                self.git.clone(str(mirror.path), checkout_path, cwd=cwd)
            except GitCommandError as e:
                raise RemoteOperationError(
                    f"Failed to import package from {identifier.clone_url}.",
                    clone_url=identifier.clone_url,
                    details=e.details,
                ) from e

            source_root = checkout_path / self.specification_root
            if source_root.is_symlink():
                raise RemoteOperationError(
                    f"Refusing to import {identifier.clone_url}: "
                    f"{self.specification_root} is a symbolic link.",
                    clone_url=identifier.clone_url,
                )
            if not source_root.is_dir():
                raise MissingRemoteContentError(identifier.clone_url, self.specification_root)

            matcher = self._read_export_ignores(checkout_path, identifier)

            try:
                self._replace_tree(source_root, target_path, matcher)
            except OSError as e:
                raise RemoteOperationError(
                    f"Failed to import package from {identifier.clone_url}: {e}",
                    clone_url=identifier.clone_url,
                ) from e

        result = ImportedPackage(
            package_id=identifier.raw,
            source_url=identifier.clone_url,
            target_path=str(target_path),
        )
        self.last_result = result
        logger.info(f"Imported {identifier.raw} into {target_path}")
        return result

    def _read_export_ignores(self, checkout_path: Path, identifier: PackageIdentifier) -> IgnoreMatcher:
        """Patterns from the package's own build file, if it has one."""
        build_file = BuildFile.for_project(checkout_path)
        if not build_file.exists():
            return compile_patterns([])
        try:
            patterns = build_file.export_ignores()
        except CatalogFormatError as e:
            raise CatalogFormatError(f"Invalid build file in package {identifier.clone_url}: {e}") from e
        except OSError as e:
            raise RemoteOperationError(
                f"Failed to read build file of {identifier.clone_url}: {e}",
                clone_url=identifier.clone_url,
            ) from e
        logger.debug(f"{identifier.raw} exports with {len(patterns)} ignore pattern(s)")
        return compile_patterns(patterns)

    def _replace_tree(self, source: Path, dest: Path, matcher: IgnoreMatcher) -> None:
        """Remove ``dest`` and copy ``source`` into it through ``matcher``."""
        if dest.is_symlink() or dest.is_file():
            dest.unlink()
        elif dest.exists():
            shutil.rmtree(dest)

        dest.parent.mkdir(parents=True, exist_ok=True)

        shutil.copytree(
            source,
            dest,
            ignore=_ignore_callback(source, matcher),
            dirs_exist_ok=False,
        )
