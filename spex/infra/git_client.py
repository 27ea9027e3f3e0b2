"""
Git client infrastructure for spex.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Commands are always passed to git as argument lists and are never
interpreted by a shell.
"""

import subprocess
from typing import List, Optional, Sequence
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git invocation failed, timed out, or git could not be started."""

    def __init__(self, args: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        super().__init__(
            f"git command failed (rc={returncode}): {' '.join(self.args_list)}"
        )

    @property
    def details(self) -> str:
        """Captured stderr and stdout, joined for diagnostics."""
        return "\n".join(part.strip() for part in (self.stderr, self.stdout) if part.strip())


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        client.clone_mirror("https://github.com/org/repo.git", Path("/cache/repo.git"))
        updated = client.last_commit_time(Path("/cache/repo.git"))
    """

    def __init__(self, executable: str = "git", timeout: Optional[int] = 600):
        """
        Initialize GitClient.

        Args:
            executable: git executable name or path
            timeout: Command timeout in seconds (None disables it)
        """
        self.executable = executable
        self.timeout = timeout

    def run(self, args: List[str], cwd: Optional[Path] = None) -> str:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory

        Returns:
            Captured stdout

        Raises:
            GitCommandError: On non-zero exit, timeout, or missing executable
        """
        cmd = [self.executable, *args]
        logger.debug(f"Running {cmd} in {cwd or '.'}")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Git command timed out: {cmd}")
            raise GitCommandError(cmd, -1, stderr=f"timed out after {e.timeout}s")
        except OSError as e:
            raise GitCommandError(cmd, -1, stderr=str(e))

        if result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stdout, result.stderr)

        return result.stdout

    def clone_mirror(self, url: str, destination: Path, cwd: Optional[Path] = None) -> None:
        """Create a bare mirror clone (all refs, no working tree)."""
        self.run(["clone", "--mirror", "--quiet", url, str(destination)], cwd=cwd)

    def set_remote_url(self, repo: Path, url: str, remote: str = "origin") -> None:
        """Point an existing remote at a new URL."""
        self.run(["remote", "set-url", remote, url], cwd=repo)

    def fetch_prune(self, repo: Path, remote: str = "origin") -> None:
        """Fetch all refs from a remote, pruning refs deleted upstream."""
        self.run(["fetch", "--quiet", "--prune", remote], cwd=repo)

    def clone(self, source: str, destination: Path, cwd: Optional[Path] = None) -> None:
        """Clone and check out the default branch of ``source``."""
        self.run(["clone", "--quiet", source, str(destination)], cwd=cwd)

    def last_commit_time(self, repo: Path) -> str:
        """
        Committer time of the newest commit reachable from any ref.

        Returns:
            Raw ``%ct`` output (epoch seconds), possibly empty
        """
        return self.run(["log", "--all", "-1", "--format=%ct"], cwd=repo).strip()

    def show_file(self, repo: Path, path: str, revision: str = "HEAD") -> str:
        """Content of ``path`` at ``revision``."""
        return self.run(["show", f"{revision}:{path}"], cwd=repo)
