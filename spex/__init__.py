"""
spex - shared specification packages for software projects.

A project keeps its own specifications (ADRs, instructions, data formats,
features) as markdown under ``spex/`` and declares external packages in
``.spex/spex.yml``. spex mirrors those packages into a local cache and
copies their ``spex/`` trees into ``.spex/imports``.

Quick Start:
    from pathlib import Path
    from spex import BuildService, ImportService, MirrorCache, drain

    cache = MirrorCache(Path("~/.cache/spex/packages").expanduser())
    service = BuildService(ImportService(cache))

    for event in service.build(Path.cwd()):
        print(event)

    for imported in service.last_result.imported_packages:
        print(imported.package_id, imported.target_path)

Package identifiers:
    myorg/adr-node                          (default host github.com)
    gitlab.example.com/team/instructions
    https://github.com/myorg/adr-node.git

Services:
    BuildService - Validate, write AGENTS.md, import declared packages
    ImportService - Import one package into a target directory
    CatalogBuildService - Build spex-catalog-index.yml
    DiscoverService - Compare a catalog with a project, add packages
"""

__version__ = "0.3.0"

from .domain import (
    CatalogEntry,
    Event,
    ImportedPackage,
    PackageIdentifier,
    drain,
    parse_package_id,
)
from .exit_codes import (
    CatalogFormatError,
    IdentifierFormatError,
    MissingRemoteContentError,
    RemoteOperationError,
    SpexError,
    ValidationError,
)
from .ignore import IgnoreMatcher, compile_patterns
from .infra import GitClient, MirrorCache
from .services import (
    BuildService,
    CatalogBuildService,
    DiscoverService,
    ImportService,
    MetadataHarvester,
    ValidationService,
)

__all__ = [
    '__version__',
    'CatalogEntry',
    'Event',
    'ImportedPackage',
    'PackageIdentifier',
    'drain',
    'parse_package_id',
    'CatalogFormatError',
    'IdentifierFormatError',
    'MissingRemoteContentError',
    'RemoteOperationError',
    'SpexError',
    'ValidationError',
    'IgnoreMatcher',
    'compile_patterns',
    'GitClient',
    'MirrorCache',
    'BuildService',
    'CatalogBuildService',
    'DiscoverService',
    'ImportService',
    'MetadataHarvester',
    'ValidationService',
]
