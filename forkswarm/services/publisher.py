"""
Manifest publishing service for forkswarm.

Writes the manifest if its content changed and commits/pushes it if the
work tree changed. Timestamp-only differences count as unchanged, so a
run that discovers the same forks leaves the repository untouched.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..domain.manifest import SwarmManifest, strip_timestamp
from ..domain.operation import PublishResult, PublishStatus
from ..exit_codes import ManifestWriteError
from ..infra.file_store import FileStore
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "🐝 Swarm: Update topology ({fork_count} forks on {platform})"
NOTHING_TO_COMMIT = "nothing to commit"


@dataclass
class PublishOptions:
    """Options for publishing a manifest."""
    manifest_path: str = ".swarm/manifest.json"
    remote: str = "origin"
    user_name: str = "Swarm Coordinator"
    user_email: str = "swarm@devswarm.local"
    push: bool = True
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides) -> 'PublishOptions':
        git = config.get('git', {})
        options = cls(
            manifest_path=config.get('manifest', {}).get('path', cls.manifest_path),
            remote=git.get('remote', cls.remote),
            user_name=git.get('user_name', cls.user_name),
            user_email=git.get('user_email', cls.user_email),
            push=bool(git.get('push', cls.push)),
        )
        for key, value in overrides.items():
            setattr(options, key, value)
        return options


class ManifestPublisher:
    """
    Persists a SwarmManifest into a repository checkout.

    Only the manifest's directory is staged, and the bot identity is set
    with `git config --local`, never globally.

    Example:
        publisher = ManifestPublisher("/path/to/repo", PublishOptions())
        result = publisher.publish(manifest)
        print(result.status.value)
    """

    def __init__(
        self,
        repo_path: str,
        options: Optional[PublishOptions] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize ManifestPublisher.

        Args:
            repo_path: Repository root the manifest path is relative to
            options: Publish options (defaults if None)
            git_client: GitClient instance (creates new if None)
        """
        self.repo_path = str(repo_path)
        self.options = options or PublishOptions()
        self.git = git_client or GitClient()
        self.store = FileStore(Path(self.repo_path) / self.options.manifest_path)

    @property
    def manifest_dir(self) -> str:
        """Manifest directory relative to the repository root."""
        parent = Path(self.options.manifest_path).parent
        return parent.as_posix() if str(parent) != '.' else self.options.manifest_path

    def publish(self, manifest: SwarmManifest) -> PublishResult:
        """
        Write, commit and push the manifest as needed.

        Args:
            manifest: Manifest to persist

        Returns:
            PublishResult describing what happened

        Raises:
            ManifestWriteError: If the manifest file cannot be written
        """
        path = str(self.store.path)

        if self.options.dry_run:
            return PublishResult(
                status=PublishStatus.DRY_RUN,
                manifest_path=path,
                message="Dry run, manifest not written",
            )

        written = self._write_if_changed(manifest)

        if not self.git.is_git_repo(self.repo_path):
            logger.info("Not a git repository, manifest written without commit")
            return PublishResult(
                status=PublishStatus.NOT_A_REPOSITORY,
                manifest_path=path,
                written=written,
                message="Not a git repository",
            )

        if not self.git.has_changes(self.repo_path, self.manifest_dir):
            logger.info("No changes to commit")
            return PublishResult(
                status=PublishStatus.NO_CHANGES,
                manifest_path=path,
                written=written,
                message="No changes to commit",
            )

        return self._commit_and_push(manifest, path, written)

    def _write_if_changed(self, manifest: SwarmManifest) -> bool:
        previous = self.store.read()
        if previous is not None and strip_timestamp(previous) == manifest.content_key():
            logger.debug(f"Manifest content unchanged, keeping {self.store.path}")
            return False

        try:
            self.store.write_text(manifest.to_json())
        except OSError as e:
            raise ManifestWriteError(f"Cannot write manifest {self.store.path}: {e}", e) from e

        logger.info(f"Swarm manifest updated: {self.store.path}")
        return True

    def _commit_and_push(self, manifest: SwarmManifest, path: str, written: bool) -> PublishResult:
        options = self.options

        if not self.git.set_local_identity(self.repo_path, options.user_name, options.user_email):
            logger.debug("Could not set local git identity, committing with existing identity")

        added = self.git.add(self.repo_path, self.manifest_dir)
        if not added.ok:
            logger.warning(f"git add failed: {added.output}")
            return PublishResult(
                status=PublishStatus.COMMIT_FAILED,
                manifest_path=path,
                written=written,
                error=added.output or "git add failed",
            )

        message = COMMIT_MESSAGE.format(
            fork_count=manifest.fork_count,
            platform=manifest.platform.value,
        )
        commit = self.git.commit(self.repo_path, message, self.manifest_dir)

        if not commit.ok:
            if NOTHING_TO_COMMIT in commit.output:
                logger.info("No changes to commit")
                return PublishResult(
                    status=PublishStatus.NO_CHANGES,
                    manifest_path=path,
                    written=written,
                    message="No changes to commit",
                )
            logger.warning(f"git commit failed: {commit.output}")
            return PublishResult(
                status=PublishStatus.COMMIT_FAILED,
                manifest_path=path,
                written=written,
                error=commit.output or "git commit failed",
            )

        logger.info("Commit successful")

        if not options.push:
            return PublishResult(
                status=PublishStatus.COMMITTED,
                manifest_path=path,
                written=written,
                committed=True,
                message="Push disabled",
            )

        push = self.git.push(self.repo_path, remote=options.remote)
        if push.ok:
            logger.info("Changes pushed")
            return PublishResult(
                status=PublishStatus.PUSHED,
                manifest_path=path,
                written=written,
                committed=True,
                pushed=True,
            )

        # Expected on forks without write access
        logger.info("Push skipped (no write access or no changes)")
        logger.debug(f"git push output: {push.output}")
        return PublishResult(
            status=PublishStatus.COMMITTED,
            manifest_path=path,
            written=written,
            committed=True,
            message="Push skipped (no write access or no changes)",
        )
