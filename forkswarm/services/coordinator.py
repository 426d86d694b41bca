"""
Swarm coordination service for forkswarm.

Wires the pipeline together: remote URL -> identity -> platform -> forks
-> health -> manifest -> publish. Everything ambient (environment, git,
HTTP, clock, hash capability) is injected at construction so runs are
deterministic under test.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .. import __version__
from ..config import load_config
from ..domain.identity import RepositoryIdentity, parse_remote_url
from ..domain.manifest import (
    DEFAULT_HASH_ALGORITHMS,
    Hasher,
    SwarmManifest,
    build_manifest,
    resolve_hasher,
)
from ..domain.operation import PublishResult
from ..domain.platform import Platform, detect_platform
from ..infra.forge_client import ForgeClient, get_forge_client
from ..infra.git_client import GitClient
from .publisher import ManifestPublisher, PublishOptions

logger = logging.getLogger(__name__)

ForgeFactory = Callable[[Platform], ForgeClient]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CoordinationResult:
    """Everything one run produced."""
    identity: RepositoryIdentity
    platform: Platform
    manifest: SwarmManifest
    publish: PublishResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'summary',
            'platform': self.platform.value,
            'repository': self.manifest.repository,
            'forge_host': self.manifest.forge_host,
            'node_id': self.manifest.node_id,
            'fork_count': self.manifest.fork_count,
            'health': self.manifest.health.value,
            'publish': self.publish.to_dict(),
        }


class SwarmCoordinator:
    """
    Produces and persists one swarm snapshot per run().

    Example:
        coordinator = SwarmCoordinator(repo_path=".")
        result = coordinator.run()
        print(result.manifest.health.value)
    """

    def __init__(
        self,
        repo_path: str = ".",
        config: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        git_client: Optional[GitClient] = None,
        forge_factory: Optional[ForgeFactory] = None,
        hasher: Optional[Hasher] = None,
        resolve_hash: bool = True,
        clock: Clock = utc_now,
        publisher: Optional[ManifestPublisher] = None,
        dry_run: bool = False,
        push: Optional[bool] = None,
    ):
        """
        Initialize SwarmCoordinator.

        Args:
            repo_path: Repository checkout to snapshot
            config: Configuration dict (loads default if None)
            environ: Environment for CI signals and credentials (os.environ if None)
            git_client: GitClient instance (creates new if None)
            forge_factory: Platform -> ForgeClient (get_forge_client if None)
            hasher: Hash capability for node_id; probed from config if None
                and resolve_hash is True
            resolve_hash: Set False with hasher=None to simulate no hash support
            clock: Returns the capture time
            publisher: ManifestPublisher (built from config if None)
            dry_run: Build the manifest without writing or committing
            push: Override git.push from config
        """
        self.repo_path = str(repo_path)
        self.environ = os.environ if environ is None else environ
        self.config = config or load_config(environ=self.environ)
        self.git = git_client or GitClient(
            timeout=self.config.get('git', {}).get('timeout_seconds', 30)
        )
        self.forge_factory = forge_factory or self._default_forge_factory
        if hasher is None and resolve_hash:
            hasher = resolve_hasher(self._hash_algorithms())
        self.hasher = hasher
        self.clock = clock

        overrides: Dict[str, Any] = {'dry_run': dry_run}
        if push is not None:
            overrides['push'] = push
        self.publisher = publisher or ManifestPublisher(
            self.repo_path,
            PublishOptions.from_config(self.config, **overrides),
            git_client=self.git,
        )

    def _hash_algorithms(self) -> Tuple[str, ...]:
        """hash.algorithms as a tuple; a string (e.g. from the environment) is comma-separated."""
        algorithms = self.config.get('hash', {}).get('algorithms', DEFAULT_HASH_ALGORITHMS)
        if isinstance(algorithms, str):
            return tuple(name.strip() for name in algorithms.split(',') if name.strip())
        return tuple(algorithms)

    @property
    def token(self) -> Optional[str]:
        """GitHub credential from config, falling back to GITHUB_TOKEN."""
        token = self.config.get('github', {}).get('token') or self.environ.get('GITHUB_TOKEN')
        return str(token) if token else None

    def _default_forge_factory(self, platform: Platform) -> ForgeClient:
        forge = self.config.get('forge', {})
        return get_forge_client(
            platform,
            token=self.token,
            timeout=forge.get('timeout_seconds', 10),
            page_size=forge.get('per_page', 100),
            github_api_url=forge.get('github_api_url', 'https://api.github.com'),
        )

    def run(self) -> CoordinationResult:
        """
        Run the pipeline once.

        Returns:
            CoordinationResult

        Raises:
            ManifestWriteError: If the manifest cannot be written
        """
        logger.info(f"Self-Distributing Swarm Coordinator v{__version__}")

        remote = self.config.get('git', {}).get('remote', 'origin')
        remote_url = self.git.remote_url(self.repo_path, remote) or ""
        identity = parse_remote_url(remote_url)
        if identity.is_unknown:
            logger.info(f"Remote '{remote}' missing or unrecognized, repository identity unknown")

        platform = detect_platform(self.environ, identity.host)
        logger.info(f"Detected platform: {platform.value}")
        logger.info(f"Repository: {identity.full_name}")
        logger.info(f"Forge host: {identity.host}")

        logger.info("Discovering swarm topology...")
        forks = self.forge_factory(platform).list_forks(identity)

        manifest = build_manifest(
            identity=identity,
            platform=platform,
            forks=forks,
            hasher=self.hasher,
            now=self.clock(),
            version=__version__,
        )
        logger.info(f"Swarm health: {manifest.health.value} ({manifest.fork_count} forks)")

        publish = self.publisher.publish(manifest)

        return CoordinationResult(
            identity=identity,
            platform=platform,
            manifest=manifest,
            publish=publish,
        )
