"""
forkswarm - Point-in-time snapshots of a repository's fork swarm.

forkswarm enumerates the forks of the current repository on its forge
(GitHub, GitLab, Gitea, Forgejo), classifies the swarm's health from the
fork count, and keeps a manifest at .swarm/manifest.json up to date,
committing and pushing it only when the topology changed.

Quick Start:
    from forkswarm import SwarmCoordinator

    result = SwarmCoordinator(repo_path=".").run()
    print(result.manifest.health.value, result.publish.status.value)

Pieces can also be used on their own:
    from forkswarm import parse_remote_url, detect_platform, classify

    identity = parse_remote_url("git@gitlab.com:group/sub/project.git")
    platform = detect_platform({}, identity.host)
    classify(4)  # HealthTier.VULNERABLE
"""

__version__ = "1.0.0"

from .domain import (
    RepositoryIdentity,
    UNKNOWN_IDENTITY,
    parse_remote_url,
    Platform,
    detect_platform,
    HealthTier,
    classify,
    SwarmManifest,
    build_manifest,
    PublishResult,
    PublishStatus,
)
from .services import SwarmCoordinator, CoordinationResult, ManifestPublisher

__all__ = [
    "__version__",
    "RepositoryIdentity",
    "UNKNOWN_IDENTITY",
    "parse_remote_url",
    "Platform",
    "detect_platform",
    "HealthTier",
    "classify",
    "SwarmManifest",
    "build_manifest",
    "PublishResult",
    "PublishStatus",
    "SwarmCoordinator",
    "CoordinationResult",
    "ManifestPublisher",
]
