"""
Catalog discovery for spex.

Compares a catalog index against a project's build file and records the
packages a user picks. Prompting is left to the caller.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, Iterable, List, Optional

from ..domain import event as events
from ..domain.catalog import CatalogEntry, parse_catalog_index
from ..domain.event import Event
from ..exit_codes import CatalogFormatError
from ..infra.file_store import YamlStore
from .build_file import BuildFile

logger = logging.getLogger(__name__)


def available_entries(catalog_entries: Iterable[CatalogEntry], imported_ids: Iterable[str]) -> List[CatalogEntry]:
    """Catalog entries not yet declared by the project, in catalog order."""
    imported = set(imported_ids)
    return [entry for entry in catalog_entries if entry.id not in imported]


@dataclass
class DiscoverState:
    """Snapshot of one discovery step."""
    build_file_path: str
    catalog_index_path: str
    imported_packages: List[str] = field(default_factory=list)
    catalog_entries: List[CatalogEntry] = field(default_factory=list)
    available_entries: List[CatalogEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'build_file_path': self.build_file_path,
            'catalog_index_path': self.catalog_index_path,
            'imported_packages': list(self.imported_packages),
            'catalog_entries': [entry.to_dict() for entry in self.catalog_entries],
            'available_entries': [entry.to_dict() for entry in self.available_entries],
        }


class DiscoverService:
    """
    Service behind ``spex catalog discover``.

    Both operations create the project's build file when it is missing
    and re-read everything before returning, so the returned state always
    matches what is on disk.

    Example:
        service = DiscoverService(Path.cwd(), Path("spex-catalog-index.yml"))
        state = drain(service.state())
        if state.available_entries:
            drain(service.add_package(state.available_entries[0].id))
    """

    def __init__(self, project_dir: Path, catalog_index_path: Path):
        self.project_dir = Path(project_dir).resolve()
        self.catalog_index_path = Path(catalog_index_path).resolve()
        self.build_file = BuildFile.for_project(self.project_dir)
        self.last_result: Optional[DiscoverState] = None

    def state(self) -> Generator[Event, None, DiscoverState]:
        """
        Current imported, catalog and available sets.

        Raises:
            CatalogFormatError: Missing or malformed catalog index
        """
        yield from self._ensure_build_file()
        return self._read_state()

    def add_package(self, package_id: str) -> Generator[Event, None, DiscoverState]:
        """
        Declare ``package_id`` in the build file. Adding a package that is
        already declared changes nothing.

        Raises:
            CatalogFormatError: Blank id, or missing or malformed catalog index
        """
        package_id = (package_id or '').strip()
        if not package_id:
            raise CatalogFormatError("Package ID must not be empty.")

        yield from self._ensure_build_file()
        if self.build_file.add_package(package_id):
            yield Event(events.PACKAGE_ADDED, {
                'package_id': package_id,
                'build_file_path': str(self.build_file.path),
            })
        else:
            logger.debug(f"{package_id} is already declared")

        return self._read_state()

    def _ensure_build_file(self) -> Generator[Event, None, None]:
        if self.build_file.create():
            yield Event(events.BUILD_FILE_CREATED, {'path': str(self.build_file.path)})

    def _read_catalog_entries(self) -> List[CatalogEntry]:
        index = YamlStore(self.catalog_index_path)
        if not index.exists():
            raise CatalogFormatError(f"Missing catalog index: {self.catalog_index_path}")
        return parse_catalog_index(index.read_raw())

    def _read_state(self) -> DiscoverState:
        imported = self.build_file.packages()
        catalog = self._read_catalog_entries()

        state = DiscoverState(
            build_file_path=str(self.build_file.path),
            catalog_index_path=str(self.catalog_index_path),
            imported_packages=imported,
            catalog_entries=catalog,
            available_entries=available_entries(catalog, imported),
        )
        self.last_result = state
        return state
