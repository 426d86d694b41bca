"""
Infrastructure layer for forkswarm.

Contains abstractions for external systems:
- GitClient: Git command execution
- ForgeClient: Fork enumeration over forge REST APIs
- FileStore: Manifest file persistence

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitResult
from .forge_client import (
    ForgeClient,
    GitHubForgeClient,
    GitLabForgeClient,
    GiteaForgeClient,
    ForgejoForgeClient,
    GenericForgeClient,
    RateLimitStatus,
    get_forge_client,
)
from .file_store import FileStore

__all__ = [
    'GitClient',
    'GitResult',
    'ForgeClient',
    'GitHubForgeClient',
    'GitLabForgeClient',
    'GiteaForgeClient',
    'ForgejoForgeClient',
    'GenericForgeClient',
    'RateLimitStatus',
    'get_forge_client',
    'FileStore',
]
