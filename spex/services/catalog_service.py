"""
Catalog build service for spex.

Turns a curated catalog specification (``spex-catalog.yml``) into a
browsable catalog index (``spex-catalog-index.yml``). Every package is
mirrored through the cache, then a display name and a last-update time
are harvested from its history.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from ..config import (
    CATALOG_INDEX_FILE_NAME,
    CATALOG_SPECIFICATION_FILE_NAME,
    DEFAULT_PACKAGE_HOST,
)
from ..domain import event as events
from ..domain.catalog import CatalogEntry, catalog_index_document, parse_catalog_specification
from ..domain.event import Event
from ..domain.package import parse_package_id
from ..exit_codes import CatalogFormatError, RemoteOperationError
from ..infra.file_store import YamlStore
from ..infra.git_client import GitClient, GitCommandError
from ..infra.mirror_cache import CachedMirror, MirrorCache
from .import_service import mirror_event

logger = logging.getLogger(__name__)

README_CANDIDATES = ["README.md", "readme.md", "Readme.md", "README.MD"]

# ATX level-one heading: at most 3 leading spaces, closing hashes allowed
_TITLE_RE = re.compile(r'^ {0,3}#[ \t]+(.+?)(?:[ \t]+#*)?[ \t]*$')
_FENCE_RE = re.compile(r'^ {0,3}(`{3,}|~{3,})')


def extract_readme_title(content: str) -> Optional[str]:
    """First level-one heading of a markdown document outside code blocks, or None."""
    if content.startswith('\ufeff'):
        content = content[1:]

    fence = None
    for line in content.splitlines():
        fence_match = _FENCE_RE.match(line)
        if fence is not None:
            # A closing fence uses the same character, at least as many times
            if (fence_match and fence_match.group(1)[0] == fence[0]
                    and len(fence_match.group(1)) >= len(fence)
                    and not line.strip().lstrip(fence[0])):
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            continue

        match = _TITLE_RE.match(line)
        if match:
            title = match.group(1).strip()
            if title:
                return title
    return None


class MetadataHarvester:
    """Reads catalog metadata from a package mirror."""

    def __init__(self, git: Optional[GitClient] = None, readme_candidates: Optional[List[str]] = None):
        self.git = git or GitClient()
        self.readme_candidates = readme_candidates or list(README_CANDIDATES)

    def last_updated(self, mirror: CachedMirror) -> int:
        """
        Commit time of the newest commit on any ref, in epoch seconds.

        Raises:
            RemoteOperationError: If git fails or reports no usable time
        """
        clone_url = mirror.identifier.clone_url
        try:
            output = self.git.last_commit_time(mirror.path)
        except GitCommandError as e:
            raise RemoteOperationError(
                f"Failed to read last update time for {clone_url}.",
                clone_url=clone_url,
                details=e.details,
            ) from e

        if not output.isdecimal() or int(output) <= 0:
            raise RemoteOperationError(
                f"Failed to read last update time for {clone_url}",
                clone_url=clone_url,
            )
        return int(output)

    def display_name(self, mirror: CachedMirror) -> str:
        """
        Title of the README at HEAD, falling back to the raw identifier
        when there is no README or it has no level-one heading.
        """
        for candidate in self.readme_candidates:
            try:
                content = self.git.show_file(mirror.path, candidate)
            except GitCommandError:
                logger.debug(f"{mirror.identifier.raw}: no {candidate} at HEAD")
                continue

            title = extract_readme_title(content)
            if title:
                return title
            logger.debug(f"{mirror.identifier.raw}: {candidate} has no title")

        return mirror.identifier.raw

    def harvest(self, mirror: CachedMirror) -> CatalogEntry:
        updated = self.last_updated(mirror)
        return CatalogEntry(
            id=mirror.identifier.raw,
            name=self.display_name(mirror),
            updated=updated,
        )


@dataclass
class CatalogBuildResult:
    """Result of a catalog build."""
    cwd: str
    specification_file_path: str
    index_file_path: str
    packages: List[CatalogEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cwd': self.cwd,
            'specification_file_path': self.specification_file_path,
            'index_file_path': self.index_file_path,
            'packages': [entry.to_dict() for entry in self.packages],
        }


class CatalogBuildService:
    """
    Service for building a catalog index.

    Example:
        service = CatalogBuildService(MirrorCache(cache_root))
        for event in service.build(Path.cwd()):
            print(event)
        print(service.last_result.index_file_path)
    """

    def __init__(
        self,
        cache: MirrorCache,
        harvester: Optional[MetadataHarvester] = None,
        default_host: str = DEFAULT_PACKAGE_HOST,
    ):
        self.cache = cache
        self.harvester = harvester or MetadataHarvester(cache.git)
        self.default_host = default_host
        self.last_result: Optional[CatalogBuildResult] = None

    def build(self, cwd: Path) -> Generator[Event, None, CatalogBuildResult]:
        """
        Build ``spex-catalog-index.yml`` in ``cwd`` from
        ``spex-catalog.yml``. Entries keep the specification's order.

        Raises:
            CatalogFormatError: Missing or malformed catalog specification
            IdentifierFormatError: A listed identifier is invalid
            RemoteOperationError: Mirroring or harvesting a package failed
        """
        cwd = Path(cwd).resolve()
        specification = YamlStore(cwd / CATALOG_SPECIFICATION_FILE_NAME)
        index = YamlStore(cwd / CATALOG_INDEX_FILE_NAME)
        self.last_result = None

        yield Event(events.CATALOG_BUILD_STARTED, {'cwd': str(cwd)})

        if not specification.exists():
            raise CatalogFormatError(f"Catalog specification not found: {specification.path}")
        package_ids = parse_catalog_specification(specification.read_raw())

        yield Event(events.CATALOG_SPECIFICATION_READ, {
            'path': str(specification.path),
            'package_count': len(package_ids),
        })

        entries: List[CatalogEntry] = []
        for raw_package_id in package_ids:
            identifier = parse_package_id(raw_package_id, self.default_host)

            mirror = self.cache.ensure_mirror(identifier, cwd)
            yield mirror_event(mirror)

            entry = self.harvester.harvest(mirror)
            entries.append(entry)
            yield Event(events.CATALOG_ENTRY_HARVESTED, entry.to_dict())

        index.write(catalog_index_document(entries))
        yield Event(events.CATALOG_INDEX_WRITTEN, {'path': str(index.path)})

        result = CatalogBuildResult(
            cwd=str(cwd),
            specification_file_path=str(specification.path),
            index_file_path=str(index.path),
            packages=entries,
        )
        yield Event(events.CATALOG_BUILD_FINISHED, {
            'index_file_path': result.index_file_path,
            'package_count': len(entries),
        })

        self.last_result = result
        logger.info(f"Catalog index written with {len(entries)} package(s)")
        return result
