"""
Build service for spex.

Prepares a project: validates its ``spex/`` layout, writes ``AGENTS.md``
and imports every package declared in ``.spex/spex.yml`` into
``.spex/imports/{host}/{namespace}/{name}``.

Packages are processed one at a time, in declared order. The first
failure aborts the build; packages imported before it stay on disk.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from ..config import (
    AGENTS_FILE_NAME,
    DEFAULT_PACKAGE_HOST,
    IMPORTS_DIRECTORY_NAME,
    SPEX_DIRECTORY_NAME,
)
from ..domain import event as events
from ..domain.event import Event
from ..domain.package import ImportedPackage, PackageIdentifier, parse_package_id
from ..exit_codes import IdentifierFormatError
from .build_file import BuildFile
from .import_service import ImportService
from .validation_service import ValidationResult, ValidationService

logger = logging.getLogger(__name__)

AGENTS_INSTRUCTION = """\
This project contains specifications of different types and instructions located in:
- `spex/**/*.md`
- `.spex/imports/**/*.md`

Depending on the instruction or specification type it is located in a matching subdirectory like `adr`, `instruction`, `dataformat`, `feature`, etc.

Please take these specifications into account when working with the project.

When in doubt, specifications in `spex` take precedence over imported specifications in `.spex/imports`.
"""


@dataclass
class BuildResult:
    """Result of a build."""
    cwd: str
    agents_file_path: str
    build_file_path: str
    validation: Optional[ValidationResult] = None
    imported_packages: List[ImportedPackage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cwd': self.cwd,
            'agents_file_path': self.agents_file_path,
            'build_file_path': self.build_file_path,
            'validated_types': self.validation.type_names if self.validation else [],
            'imported_packages': [p.to_dict() for p in self.imported_packages],
        }


def import_target_path(cwd: Path, identifier: PackageIdentifier) -> Path:
    """
    ``.spex/imports/{host}/{namespace}/{name}`` under ``cwd``.

    Raises:
        IdentifierFormatError: If the path would leave the imports directory
    """
    imports_root = (Path(cwd) / SPEX_DIRECTORY_NAME / IMPORTS_DIRECTORY_NAME).resolve()
    target = imports_root.joinpath(*identifier.segments).resolve()
    if target == imports_root or imports_root not in target.parents:
        raise IdentifierFormatError(identifier.raw, "Package identifier escapes the imports directory")
    return target


class BuildService:
    """
    Service running the project build pipeline.

    Example:
        service = BuildService(ImportService(MirrorCache(cache_root)))
        for event in service.build(Path.cwd()):
            print(event)
        print(len(service.last_result.imported_packages))
    """

    def __init__(
        self,
        importer: ImportService,
        validator: Optional[ValidationService] = None,
        default_host: str = DEFAULT_PACKAGE_HOST,
    ):
        self.importer = importer
        self.validator = validator or ValidationService()
        self.default_host = default_host
        self.last_result: Optional[BuildResult] = None

    def build(self, cwd: Path) -> Generator[Event, None, BuildResult]:
        """
        Run the build in ``cwd``.

        Yields progress events, returns BuildResult.

        Raises:
            ValidationError: Project layout is invalid
            IdentifierFormatError: A declared package identifier is invalid
            MissingRemoteContentError: A package has nothing to import
            RemoteOperationError: Fetching or copying a package failed
        """
        cwd = Path(cwd).resolve()
        build_file = BuildFile.for_project(cwd)
        agents_file_path = cwd / AGENTS_FILE_NAME

        result = BuildResult(
            cwd=str(cwd),
            agents_file_path=str(agents_file_path),
            build_file_path=str(build_file.path),
        )
        self.last_result = None

        yield Event(events.BUILD_STARTED, {'cwd': str(cwd)})

        result.validation = self.validator.validate(cwd)
        yield Event(events.VALIDATION_PASSED, {'types': result.validation.type_names})

        agents_file_path.write_text(AGENTS_INSTRUCTION, encoding='utf-8')
        yield Event(events.AGENTS_FILE_WRITTEN, {'path': str(agents_file_path)})

        if not build_file.exists():
            yield Event(events.BUILD_FILE_MISSING, {'path': str(build_file.path)})
            yield self._finished_event(result)
            return self._finish(result)

        yield Event(events.BUILD_FILE_DETECTED, {'path': str(build_file.path)})
        package_ids = build_file.packages()
        yield Event(events.PACKAGES_RESOLVED, {'package_ids': package_ids})

        for raw_package_id in package_ids:
            identifier = parse_package_id(raw_package_id, self.default_host)
            target_path = import_target_path(cwd, identifier)

            yield Event(events.PACKAGE_IMPORT_STARTED, {
                'package_id': identifier.raw,
                'source_url': identifier.clone_url,
                'target_path': str(target_path),
            })

            imported = yield from self.importer.import_package(identifier, target_path, cwd)
            result.imported_packages.append(imported)

            yield Event(events.PACKAGE_IMPORTED, imported.to_dict())

        yield self._finished_event(result)
        return self._finish(result)

    def _finished_event(self, result: BuildResult) -> Event:
        return Event(events.BUILD_FINISHED, {
            'cwd': result.cwd,
            'imported_count': len(result.imported_packages),
        })

    def _finish(self, result: BuildResult) -> BuildResult:
        self.last_result = result
        logger.info(f"Build finished: {len(result.imported_packages)} package(s) imported")
        return result
