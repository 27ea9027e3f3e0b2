"""
Catalog domain objects for spex.

The catalog specification (``spex-catalog.yml``) is a curated list of
package identifiers. The catalog index (``spex-catalog-index.yml``) is
the generated, browsable form of that list: every entry carries a
display name and the time of its most recent commit.

Two index shapes exist in the wild. Early indexes held bare identifier
strings; current ones hold ``{id, name, updated}`` mappings. Readers
accept both, writers always emit mappings.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from ..exit_codes import CatalogFormatError


@dataclass(frozen=True)
class CatalogEntry:
    """One package in a catalog index."""
    id: str
    name: str
    updated: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'updated': self.updated,
        }


def unique_strings(values: List[str]) -> List[str]:
    """Drop duplicates, keeping the first occurrence."""
    seen = set()
    result = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def parse_string_list(value: Any) -> List[str]:
    """Trimmed non-empty strings from a YAML list; anything else is ignored."""
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def parse_catalog_specification(document: Any) -> List[str]:
    """
    Read package identifiers from a parsed catalog specification.

    Raises:
        CatalogFormatError: If the document is not a mapping with a list of
            non-empty strings under ``packages``
    """
    if not isinstance(document, dict):
        raise CatalogFormatError("Catalog specification must be a YAML object.")

    packages = document.get('packages')
    if not isinstance(packages, list):
        raise CatalogFormatError("Catalog specification must contain a packages list.")

    package_ids = []
    for item in packages:
        if not isinstance(item, str):
            raise CatalogFormatError("Catalog packages list must contain only string values.")
        package_id = item.strip()
        if not package_id:
            raise CatalogFormatError("Catalog packages list must not contain empty values.")
        package_ids.append(package_id)

    return package_ids


def parse_catalog_index(document: Any) -> List[CatalogEntry]:
    """
    Read entries from a parsed catalog index, accepting the legacy
    bare-string shape as well as ``{id, name, updated}`` mappings.

    Raises:
        CatalogFormatError: If the document has no packages list or an
            item is neither a string nor a mapping with a non-empty id
    """
    if not isinstance(document, dict) or not isinstance(document.get('packages'), list):
        raise CatalogFormatError("Catalog index must contain a packages list.")

    entries: List[CatalogEntry] = []
    seen = set()

    for item in document['packages']:
        if isinstance(item, str):
            package_id = item.strip()
            if not package_id:
                continue
            entry = CatalogEntry(id=package_id, name=package_id)
        elif isinstance(item, dict):
            raw_id = item.get('id')
            if not isinstance(raw_id, str) or not raw_id.strip():
                raise CatalogFormatError("Catalog index package object must contain a non-empty id.")
            package_id = raw_id.strip()

            name = item.get('name')
            if not isinstance(name, str) or not name.strip():
                name = package_id

            updated = item.get('updated', 0)
            if isinstance(updated, bool) or not isinstance(updated, int):
                updated = 0

            entry = CatalogEntry(id=package_id, name=name.strip(), updated=updated)
        else:
            raise CatalogFormatError(
                "Catalog index packages list must contain string values or objects with id."
            )

        if entry.id in seen:
            continue
        seen.add(entry.id)
        entries.append(entry)

    return entries


def catalog_index_document(entries: List[CatalogEntry]) -> Dict[str, Any]:
    """Document written to ``spex-catalog-index.yml``."""
    return {'packages': [entry.to_dict() for entry in entries]}
