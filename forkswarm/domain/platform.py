"""
Forge platform detection.

CI runner environment variables take priority over the remote host, so a
mirror hosted on one forge but built on another reports the CI's forge.
"""

from enum import Enum
from typing import Mapping, Optional, Tuple


class Platform(Enum):
    """Supported forge platforms."""
    GITHUB = "github"
    GITLAB = "gitlab"
    GITEA = "gitea"
    FORGEJO = "forgejo"
    WOODPECKER = "woodpecker"
    GENERIC = "generic"


# Checked in order; first non-empty variable wins
CI_SIGNALS: Tuple[Tuple[str, Platform], ...] = (
    ("GITHUB_ACTIONS", Platform.GITHUB),
    ("GITLAB_CI", Platform.GITLAB),
    ("GITEA_ACTIONS", Platform.GITEA),
    ("FORGEJO_ACTIONS", Platform.FORGEJO),
    ("CI_WOODPECKER", Platform.WOODPECKER),
)

HOST_PATTERNS: Tuple[Tuple[Tuple[str, ...], Platform], ...] = (
    (("github.com",), Platform.GITHUB),
    (("gitlab",), Platform.GITLAB),
    (("gitea",), Platform.GITEA),
    (("codeberg.org", "forgejo"), Platform.FORGEJO),
)


def platform_from_environment(environ: Mapping[str, str]) -> Optional[Platform]:
    """Return the platform named by the first CI signal present, if any."""
    for variable, platform in CI_SIGNALS:
        if environ.get(variable):
            return platform
    return None


def platform_from_host(host: str) -> Platform:
    """Classify a forge host by substring match."""
    host = (host or "").lower()
    for needles, platform in HOST_PATTERNS:
        if any(needle in host for needle in needles):
            return platform
    return Platform.GENERIC


def detect_platform(environ: Mapping[str, str], host: str) -> Platform:
    """
    Detect the forge platform for this run.

    Args:
        environ: Environment mapping (injected, never read from os.environ here)
        host: Forge host parsed from the remote URL

    Returns:
        Exactly one Platform; GENERIC when nothing matches
    """
    return platform_from_environment(environ) or platform_from_host(host)
