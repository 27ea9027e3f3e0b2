"""
Shared fixtures for spex tests.

Tests that need the real git executable build throw-away repositories
under ``tmp_path`` and redirect ``https://github.com/`` to them through
``url.<base>.insteadOf``, so nothing touches the network.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, Optional

import pytest

from spex.infra.git_client import GitClient
from spex.infra.mirror_cache import MirrorCache

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=str(repo), capture_output=True, text=True, check=True
    )
    return result.stdout


class RemoteFactory:
    """Creates local repositories reachable as https://github.com/NS/NAME.git."""

    def __init__(self, root: Path):
        self.root = root

    def path(self, package: str) -> Path:
        return self.root / f"{package}.git"

    def create(self, package: str, files: Optional[Dict[str, str]] = None,
               commit_time: int = 1700000000) -> Path:
        """
        Create (or extend) a repository and commit ``files`` to it.

        Args:
            package: ``namespace/name``
            files: Relative path -> content
            commit_time: Author and committer time of the commit
        """
        repo = self.path(package)
        if not (repo / ".git").exists():
            repo.mkdir(parents=True)
            git(repo, "init", "--quiet")

        for relative, content in (files or {}).items():
            target = repo / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

        if files:
            git(repo, "add", "--all")
            date = f"@{commit_time} +0000"
            subprocess.run(
                ["git", "commit", "--quiet", "-m", "update", "--date", date],
                cwd=str(repo), check=True, capture_output=True,
                env=_commit_env(date),
            )
        return repo

    def remove(self, package: str, relative: str, commit_time: int = 1700000100) -> None:
        repo = self.path(package)
        git(repo, "rm", "-r", "--quiet", relative)
        date = f"@{commit_time} +0000"
        subprocess.run(
            ["git", "commit", "--quiet", "-m", "remove", "--date", date],
            cwd=str(repo), check=True, capture_output=True,
            env=_commit_env(date),
        )


def _commit_env(date: str) -> Dict[str, str]:
    env = os.environ.copy()
    env.update({
        "GIT_AUTHOR_NAME": "spex tests",
        "GIT_AUTHOR_EMAIL": "tests@example.com",
        "GIT_COMMITTER_NAME": "spex tests",
        "GIT_COMMITTER_EMAIL": "tests@example.com",
        "GIT_COMMITTER_DATE": date,
    })
    return env


@pytest.fixture
def remotes(tmp_path, monkeypatch):
    """Local stand-ins for https://github.com/ repositories."""
    root = tmp_path / "remotes"
    root.mkdir()
    monkeypatch.setenv("GIT_CONFIG_COUNT", "1")
    monkeypatch.setenv("GIT_CONFIG_KEY_0", f"url.{root.as_uri()}/.insteadOf")
    monkeypatch.setenv("GIT_CONFIG_VALUE_0", "https://github.com/")
    return RemoteFactory(root)


@pytest.fixture
def mirror_cache(tmp_path):
    return MirrorCache(tmp_path / "cache", git=GitClient(timeout=60))


@pytest.fixture
def spex_project(tmp_path):
    """A project with a valid spex/ layout."""
    project = tmp_path / "project"
    (project / "spex" / "adr").mkdir(parents=True)
    (project / "spex" / "adr" / "0001-record.md").write_text("# Record\n")
    return project
