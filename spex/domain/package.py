"""
Package identifier domain object for spex.

A package identifier names a remote specification collection. Three
spellings are accepted and all of them normalize to the same value:

    myorg/adr-node                          short form, default host
    gitlab.example.com/myorg/adr-node       explicit host form
    https://github.com/myorg/adr-node.git   full URL

The host, namespace and name become path segments of the mirror cache and
of the import directory, so every one of them is restricted to a safe
character set.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple
from urllib.parse import urlsplit

from ..config import DEFAULT_PACKAGE_HOST
from ..exit_codes import IdentifierFormatError

_SAFE_SEGMENT_RE = re.compile(r'[A-Za-z0-9._-]+')
_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*://')
_GIT_SUFFIX_RE = re.compile(r'\.git$', re.IGNORECASE)


@dataclass(frozen=True)
class PackageIdentifier:
    """A parsed, validated package identifier."""
    raw: str
    host: str
    namespace: str
    name: str

    @property
    def clone_url(self) -> str:
        return f"https://{self.host}/{self.namespace}/{self.name}.git"

    @property
    def segments(self) -> Tuple[str, str, str]:
        """(host, namespace, name), the key of the mirror and import paths."""
        return (self.host, self.namespace, self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'raw': self.raw,
            'host': self.host,
            'namespace': self.namespace,
            'name': self.name,
            'clone_url': self.clone_url,
        }

    def __str__(self) -> str:
        return self.raw


def _split_path(value: str) -> List[str]:
    return [segment for segment in value.split('/') if segment]


def _assert_safe_segment(label: str, value: str, raw: str) -> None:
    if not _SAFE_SEGMENT_RE.fullmatch(value) or set(value) == {'.'}:
        raise IdentifierFormatError(raw, f"Invalid {label} in package identifier")


def parse_package_id(raw: str, default_host: str = DEFAULT_PACKAGE_HOST) -> PackageIdentifier:
    """
    Parse a raw package identifier.

    Args:
        raw: Identifier as written in a build file or catalog
        default_host: Host used for the two-segment short form

    Returns:
        PackageIdentifier

    Raises:
        IdentifierFormatError: If the identifier is malformed or unsafe
    """
    if not isinstance(raw, str):
        raise IdentifierFormatError(repr(raw), "Package identifier must be a string")

    value = raw.strip().rstrip('/')
    if not value:
        raise IdentifierFormatError(raw, "Package identifier must not be empty")

    if _SCHEME_RE.match(value):
        try:
            url = urlsplit(value)
            host = url.hostname or ''
        except ValueError:
            raise IdentifierFormatError(raw, "Unsupported package URL format")

        segments = _split_path(url.path)
        if len(segments) != 2 or not host:
            raise IdentifierFormatError(raw, "Package URL must contain namespace and name")
        namespace, name = segments
    else:
        segments = _split_path(value)
        if len(segments) == 2:
            host = default_host
            namespace, name = segments
        elif len(segments) == 3 and '.' in segments[0]:
            host, namespace, name = segments
        else:
            raise IdentifierFormatError(raw, "Unsupported package identifier format")

    name = _GIT_SUFFIX_RE.sub('', name)

    _assert_safe_segment("package host", host, raw)
    _assert_safe_segment("package namespace", namespace, raw)
    _assert_safe_segment("package name", name, raw)

    return PackageIdentifier(raw=raw, host=host, namespace=namespace, name=name)


@dataclass(frozen=True)
class ImportedPackage:
    """Record of one completed import."""
    package_id: str
    source_url: str
    target_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'package_id': self.package_id,
            'source_url': self.source_url,
            'target_path': self.target_path,
        }
