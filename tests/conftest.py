"""
Shared fixtures for forkswarm tests.

Git-backed fixtures create real repositories under tmp_path; tests using
them are marked with requires_git.
"""

import pytest

from tests.git_helpers import git


@pytest.fixture
def git_repo(tmp_path):
    """A git repository with one empty commit and no remote."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "--local", "commit.gpgsign", "false")
    git(repo, "commit", "-q", "--allow-empty", "-m", "initial")
    return repo


@pytest.fixture
def bare_remote(tmp_path):
    """An empty bare repository usable as a push target."""
    remote = tmp_path / "remote.git"
    remote.mkdir()
    git(remote, "init", "-q", "--bare")
    return remote


@pytest.fixture
def github_repo(git_repo, bare_remote):
    """
    Repository whose origin looks like github.com/alice/project but
    pushes to a local bare repository.
    """
    git(git_repo, "remote", "add", "origin", "https://github.com/alice/project.git")
    git(git_repo, "config", "remote.origin.pushurl", str(bare_remote))
    return git_repo
