"""
Progress event domain object for spex.

Long-running services do not call back into the presentation layer.
They yield Event values instead, and whoever drives the generator
decides how (or whether) to show them:

    service = BuildService(...)
    for event in service.build(cwd):
        print(event)
    result = service.last_result

Events are immutable and serializable for JSONL output.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generator, TypeVar
import json

# Build pipeline
BUILD_STARTED = 'build_started'
VALIDATION_PASSED = 'validation_passed'
AGENTS_FILE_WRITTEN = 'agents_file_written'
BUILD_FILE_MISSING = 'build_file_missing'
BUILD_FILE_DETECTED = 'build_file_detected'
PACKAGES_RESOLVED = 'packages_resolved'
PACKAGE_IMPORT_STARTED = 'package_import_started'
PACKAGE_IMPORTED = 'package_imported'
BUILD_FINISHED = 'build_finished'

# Mirror cache
MIRROR_CLONED = 'mirror_cloned'
MIRROR_UPDATED = 'mirror_updated'

# Catalog
CATALOG_BUILD_STARTED = 'catalog_build_started'
CATALOG_SPECIFICATION_READ = 'catalog_specification_read'
CATALOG_ENTRY_HARVESTED = 'catalog_entry_harvested'
CATALOG_INDEX_WRITTEN = 'catalog_index_written'
CATALOG_BUILD_FINISHED = 'catalog_build_finished'

# Discovery
BUILD_FILE_CREATED = 'build_file_created'
PACKAGE_ADDED = 'package_added'

ALL_EVENT_TYPES = frozenset({
    BUILD_STARTED, VALIDATION_PASSED, AGENTS_FILE_WRITTEN, BUILD_FILE_MISSING,
    BUILD_FILE_DETECTED, PACKAGES_RESOLVED, PACKAGE_IMPORT_STARTED, PACKAGE_IMPORTED,
    BUILD_FINISHED, MIRROR_CLONED, MIRROR_UPDATED, CATALOG_BUILD_STARTED,
    CATALOG_SPECIFICATION_READ, CATALOG_ENTRY_HARVESTED, CATALOG_INDEX_WRITTEN,
    CATALOG_BUILD_FINISHED, BUILD_FILE_CREATED, PACKAGE_ADDED,
})


@dataclass(frozen=True)
class Event:
    """
    Something the engine did.

    Attributes:
        type: One of the event type constants in this module
        data: Type-specific payload (paths, package ids, counts)
        timestamp: When the event was emitted
    """

    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': self.type,
            'timestamp': self.timestamp.isoformat(),
            'data': self.data,
        }

    def to_jsonl(self) -> str:
        """Convert to single-line JSON for streaming output."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return f"{self.type} {self.data}"


T = TypeVar('T')


def drain(events: Generator[Event, None, T]) -> T:
    """Run an event generator to completion and return its result."""
    while True:
        try:
            next(events)
        except StopIteration as stop:
            return stop.value
