"""
Swarm manifest domain object for forkswarm.

The manifest is a snapshot, rebuilt from scratch on every run. It is
immutable and serializes to the JSON document stored at
.swarm/manifest.json.
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from .health import HealthTier, classify
from .identity import UNKNOWN, RepositoryIdentity
from .platform import Platform

logger = logging.getLogger(__name__)

NODE_ID_LENGTH = 16
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Probed in order by resolve_hasher()
DEFAULT_HASH_ALGORITHMS = ("sha256", "sha1", "md5")

# Constant description of how the swarm replicates; never computed
DISTRIBUTION_MECHANICS: Dict[str, str] = {
    "method": "fork-native",
    "replication": "automatic via git clone",
    "discovery": "platform API + git branches",
    "healing": "via CI/CD sync",
    "consensus": "git merge",
}


@dataclass(frozen=True)
class Hasher:
    """A resolved hash capability: algorithm name plus hex digest function."""
    name: str
    digest: Callable[[bytes], str]


def resolve_hasher(algorithms: Iterable[str] = DEFAULT_HASH_ALGORITHMS) -> Optional[Hasher]:
    """
    Return the first usable hash algorithm, or None if none is available.

    Some interpreters (FIPS builds, stripped-down embeds) lack algorithms
    that are normally guaranteed, so each candidate is actually exercised.
    """
    for name in algorithms:
        try:
            hashlib.new(name, b"")
        except (ValueError, TypeError) as e:
            logger.debug(f"Hash algorithm {name} unavailable: {e}")
            continue

        def digest(data: bytes, _name: str = name) -> str:
            return hashlib.new(_name, data).hexdigest()

        return Hasher(name=name, digest=digest)

    logger.warning("No hash algorithm available, node_id will be 'unknown'")
    return None


def compute_node_id(repository: str, hasher: Optional[Hasher]) -> str:
    """First 16 hex characters of the digest of "owner/name"."""
    if hasher is None:
        return UNKNOWN
    return hasher.digest(repository.encode("utf-8"))[:NODE_ID_LENGTH]


def format_timestamp(moment: datetime) -> str:
    """UTC, second precision, Z suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class SwarmTopology:
    """Forks discovered on the forge and the health derived from them."""
    forks: Tuple[str, ...] = ()
    health: HealthTier = HealthTier.DEGRADED

    @property
    def fork_count(self) -> int:
        return len(self.forks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fork_count': self.fork_count,
            'health': self.health.value,
            'forks': list(self.forks),
        }


@dataclass(frozen=True)
class SwarmManifest:
    """
    Point-in-time snapshot of a repository swarm.

    Attributes:
        version: forkswarm version that produced the manifest
        platform: Forge platform the forks were enumerated on
        forge_host: Host parsed from the origin remote
        repository: "owner/name"
        node_id: Stable hash of repository, or "unknown"
        updated_at: UTC ISO-8601 timestamp with Z suffix
        topology: Forks and health tier
    """
    version: str
    platform: Platform
    forge_host: str
    repository: str
    node_id: str
    updated_at: str
    topology: SwarmTopology
    distribution_mechanics: Dict[str, str] = field(
        default_factory=lambda: dict(DISTRIBUTION_MECHANICS)
    )

    @property
    def fork_count(self) -> int:
        return self.topology.fork_count

    @property
    def health(self) -> HealthTier:
        return self.topology.health

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'platform': self.platform.value,
            'forge_host': self.forge_host,
            'repository': self.repository,
            'node_id': self.node_id,
            'updated_at': self.updated_at,
            'swarm_topology': self.topology.to_dict(),
            'distribution_mechanics': dict(self.distribution_mechanics),
        }

    def to_json(self) -> str:
        """Serialize with stable key order and a trailing newline."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    def content_key(self) -> Dict[str, Any]:
        """The manifest without its timestamp, for change detection."""
        return strip_timestamp(self.to_dict())


def strip_timestamp(document: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a manifest document without updated_at."""
    return {key: value for key, value in document.items() if key != 'updated_at'}


def build_manifest(
    identity: RepositoryIdentity,
    platform: Platform,
    forks: Sequence[str],
    hasher: Optional[Hasher],
    now: datetime,
    version: str,
) -> SwarmManifest:
    """
    Assemble a SwarmManifest from the pipeline outputs.

    Args:
        identity: Parsed repository identity
        platform: Detected platform
        forks: Fork full names in API order (duplicates kept)
        hasher: Resolved hash capability, None if unavailable
        now: Capture time
        version: forkswarm version string

    Returns:
        SwarmManifest
    """
    forks = tuple(forks)
    repository = identity.full_name

    return SwarmManifest(
        version=version,
        platform=platform,
        forge_host=identity.host,
        repository=repository,
        node_id=compute_node_id(repository, hasher),
        updated_at=format_timestamp(now),
        topology=SwarmTopology(forks=forks, health=classify(len(forks))),
    )
