"""
Git client infrastructure for forkswarm.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class GitResult:
    """Outcome of a single git command."""
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitClient:
    """
    Abstraction over git commands.

    Commands are passed as argument lists, never through a shell, so
    commit messages and paths need no quoting.

    Example:
        client = GitClient()
        url = client.remote_url("/path/to/repo")
        if client.has_changes("/path/to/repo", ".swarm"):
            client.add("/path/to/repo", ".swarm")
    """

    def __init__(self, timeout: int = 30):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
        """
        self.timeout = timeout

    def _run(self, args: List[str], cwd: str) -> GitResult:
        """
        Run a git command.

        Args:
            args: Arguments after 'git' (e.g., ['status', '--porcelain'])
            cwd: Working directory

        Returns:
            GitResult with return code and combined stdout/stderr
        """
        cmd = ['git'] + args
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return GitResult(returncode=-1, output="timed out")
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return GitResult(returncode=-1, output=str(e))

        output = (result.stdout or "") + (result.stderr or "")
        return GitResult(returncode=result.returncode, output=output.strip())

    def is_git_repo(self, path: str) -> bool:
        """Check if path is inside a git work tree."""
        result = self._run(['rev-parse', '--is-inside-work-tree'], cwd=path)
        return result.ok and result.output == 'true'

    def remote_url(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Get remote URL.

        Args:
            path: Path to git repository
            remote: Remote name (default: "origin")

        Returns:
            Remote URL or None if not found
        """
        if not Path(path).is_dir():
            return None
        result = self._run(['config', '--get', f'remote.{remote}.url'], cwd=path)
        if result.ok and result.output:
            return result.output
        return None

    def has_changes(self, path: str, pathspec: str) -> bool:
        """
        Check for uncommitted changes under a pathspec, untracked files included.

        Args:
            path: Path to git repository
            pathspec: Path relative to the repository root

        Returns:
            True if the work tree differs from HEAD under pathspec
        """
        result = self._run(['status', '--porcelain', '--', pathspec], cwd=path)
        return result.ok and bool(result.output)

    def set_local_identity(self, path: str, name: str, email: str) -> bool:
        """Set user.name/user.email in this repository's config only."""
        name_set = self._run(['config', '--local', 'user.name', name], cwd=path).ok
        email_set = self._run(['config', '--local', 'user.email', email], cwd=path).ok
        return name_set and email_set

    def add(self, path: str, pathspec: str) -> GitResult:
        """Stage a pathspec."""
        return self._run(['add', '--', pathspec], cwd=path)

    def commit(self, path: str, message: str, pathspec: Optional[str] = None) -> GitResult:
        """
        Commit staged changes.

        With a pathspec only changes under it are committed; anything else
        in the index stays staged.
        """
        args = ['commit', '-m', message]
        if pathspec:
            args += ['--', pathspec]
        return self._run(args, cwd=path)

    def push(self, path: str, remote: str = "origin", ref: str = "HEAD") -> GitResult:
        """Push a ref to a remote."""
        return self._run(['push', remote, ref], cwd=path)
