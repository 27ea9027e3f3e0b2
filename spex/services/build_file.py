"""
Project build file (``.spex/spex.yml``) access.

    packages:
      - myorg/adr-node
      - gitlab.example.com/team/instructions
    export:
      ignores:
        - "**/*.draft.md"

``packages`` is ordered and duplicate free. ``export.ignores`` only
matters when the project is itself imported as a package.
"""

from pathlib import Path
from typing import Any, Dict, List
import logging

from ..config import BUILD_FILE_NAME, SPEX_DIRECTORY_NAME
from ..domain.catalog import parse_string_list, unique_strings
from ..infra.file_store import YamlStore

logger = logging.getLogger(__name__)


def build_file_path(project_dir: Path) -> Path:
    return Path(project_dir) / SPEX_DIRECTORY_NAME / BUILD_FILE_NAME


class BuildFile:
    """Read and update one project's build file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._store = YamlStore(self.path)

    @classmethod
    def for_project(cls, project_dir: Path) -> 'BuildFile':
        return cls(build_file_path(project_dir))

    def exists(self) -> bool:
        return self._store.exists()

    def read(self) -> Dict[str, Any]:
        return self._store.read()

    def packages(self) -> List[str]:
        """Declared package identifiers, in order, without duplicates."""
        return unique_strings(parse_string_list(self.read().get('packages')))

    def export_ignores(self) -> List[str]:
        export = self.read().get('export')
        if not isinstance(export, dict):
            return []
        return parse_string_list(export.get('ignores'))

    def create(self) -> bool:
        """
        Write an empty package list if the file is missing.

        Returns:
            True if the file was created
        """
        if self.exists():
            return False
        self._store.write({'packages': []})
        logger.info(f"Created {self.path}")
        return True

    def add_package(self, package_id: str) -> bool:
        """
        Append ``package_id`` unless it is already declared. Every other
        key of the document is kept.

        Returns:
            True if the file changed
        """
        document = self.read()
        packages = unique_strings(parse_string_list(document.get('packages')))
        if package_id in packages:
            return False

        packages.append(package_id)
        document['packages'] = packages
        self._store.write(document)
        logger.info(f"Added {package_id} to {self.path}")
        return True
