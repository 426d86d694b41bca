"""
Repository identity for forkswarm.

A RepositoryIdentity is derived once per run from the origin remote URL.
Parsing never fails: anything unrecognized becomes UNKNOWN_IDENTITY.
"""

import re
from dataclasses import dataclass
from typing import Optional

UNKNOWN = "unknown"

# https://[user[:token]@]host/group/subgroup/repo(.git)(/); userinfo is dropped
_HTTPS_RE = re.compile(r"^https?://(?:[^/]*@)?([^/@]+)/(.+)/([^/]+?)(?:\.git)?/?$")

# git@host:group/subgroup/repo(.git)
_SSH_RE = re.compile(r"^[^@/\s]+@([^:/]+):(.+)/([^/]+?)(?:\.git)?/?$")


@dataclass(frozen=True)
class RepositoryIdentity:
    """Forge host, owner path and repository name."""
    host: str
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def is_unknown(self) -> bool:
        return UNKNOWN in (self.host, self.owner, self.name)


UNKNOWN_IDENTITY = RepositoryIdentity(host=UNKNOWN, owner=UNKNOWN, name=UNKNOWN)


def parse_remote_url(url: Optional[str]) -> RepositoryIdentity:
    """
    Parse a git remote URL into a RepositoryIdentity.

    Handles HTTPS and SSH shorthand formats, including nested namespaces
    such as GitLab subgroups (the last path segment is the repository,
    everything before it is the owner).

    Args:
        url: Remote URL, possibly empty or None

    Returns:
        RepositoryIdentity, or UNKNOWN_IDENTITY if the URL is not recognized
    """
    if not url:
        return UNKNOWN_IDENTITY

    url = url.strip()
    match = _HTTPS_RE.match(url) or _SSH_RE.match(url)
    if not match:
        return UNKNOWN_IDENTITY

    host, owner, name = match.groups()
    owner = owner.strip("/")
    if not owner or not name:
        return UNKNOWN_IDENTITY

    return RepositoryIdentity(host=host, owner=owner, name=name)
