"""
Service layer for spex.

Services orchestrate the domain and infrastructure layers. Long-running
operations are generators yielding Event values and returning a result.
"""

from .build_file import BuildFile, build_file_path
from .validation_service import (
    SUPPORTED_SPEX_TYPES,
    ValidatedType,
    ValidationResult,
    ValidationService,
)
from .import_service import ImportService, mirror_event
from .build_service import AGENTS_INSTRUCTION, BuildResult, BuildService, import_target_path
from .catalog_service import (
    CatalogBuildResult,
    CatalogBuildService,
    MetadataHarvester,
    extract_readme_title,
)
from .discover_service import DiscoverService, DiscoverState, available_entries

__all__ = [
    'BuildFile',
    'build_file_path',
    'SUPPORTED_SPEX_TYPES',
    'ValidatedType',
    'ValidationResult',
    'ValidationService',
    'ImportService',
    'mirror_event',
    'AGENTS_INSTRUCTION',
    'BuildResult',
    'BuildService',
    'import_target_path',
    'CatalogBuildResult',
    'CatalogBuildService',
    'MetadataHarvester',
    'extract_readme_title',
    'DiscoverService',
    'DiscoverState',
    'available_entries',
]
