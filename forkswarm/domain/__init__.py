"""
Domain layer for forkswarm.

Contains pure domain objects with no I/O or side effects:
- RepositoryIdentity: host/owner/name parsed from a remote URL
- Platform: which forge the swarm lives on
- HealthTier: redundancy classification from fork count
- SwarmManifest: the persisted snapshot
- PublishResult: what happened when the snapshot was persisted
"""

from .identity import RepositoryIdentity, UNKNOWN_IDENTITY, parse_remote_url
from .platform import Platform, detect_platform
from .health import HealthTier, classify
from .manifest import (
    DISTRIBUTION_MECHANICS,
    Hasher,
    SwarmManifest,
    SwarmTopology,
    build_manifest,
    compute_node_id,
    resolve_hasher,
)
from .operation import PublishResult, PublishStatus

__all__ = [
    'RepositoryIdentity',
    'UNKNOWN_IDENTITY',
    'parse_remote_url',
    'Platform',
    'detect_platform',
    'HealthTier',
    'classify',
    'DISTRIBUTION_MECHANICS',
    'Hasher',
    'SwarmManifest',
    'SwarmTopology',
    'build_manifest',
    'compute_node_id',
    'resolve_hasher',
    'PublishResult',
    'PublishStatus',
]
