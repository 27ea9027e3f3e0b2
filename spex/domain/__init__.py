"""
Domain layer for spex.

Contains pure domain objects with no I/O or side effects:
- PackageIdentifier: A parsed, validated package identifier
- ImportedPackage: Record of one completed import
- CatalogEntry: One package of a catalog index
- Event: Progress event yielded by long-running services
"""

from .package import PackageIdentifier, ImportedPackage, parse_package_id
from .catalog import (
    CatalogEntry,
    catalog_index_document,
    parse_catalog_index,
    parse_catalog_specification,
    parse_string_list,
    unique_strings,
)
from .event import Event, drain

__all__ = [
    'PackageIdentifier',
    'ImportedPackage',
    'parse_package_id',
    'CatalogEntry',
    'catalog_index_document',
    'parse_catalog_index',
    'parse_catalog_specification',
    'parse_string_list',
    'unique_strings',
    'Event',
    'drain',
]
