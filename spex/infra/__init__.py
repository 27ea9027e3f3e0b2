"""
Infrastructure layer for spex.

Contains abstractions for external systems:
- GitClient: Git command execution
- MirrorCache: Local bare mirrors of remote package repositories
- YamlStore: YAML file persistence

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitCommandError
from .mirror_cache import CachedMirror, MirrorCache
from .file_store import YamlStore

__all__ = [
    'GitClient',
    'GitCommandError',
    'CachedMirror',
    'MirrorCache',
    'YamlStore',
]
