"""
Tests for manifest publishing.

Tests cover:
- Write-if-changed with timestamp-only differences ignored
- Commit-if-changed, scoped to the manifest directory
- Push success, push rejection and disabled push
- Nothing-to-commit versus genuine commit failure
- Fatal write failure
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from forkswarm.domain.identity import RepositoryIdentity
from forkswarm.domain.manifest import build_manifest, resolve_hasher
from forkswarm.domain.operation import PublishStatus
from forkswarm.domain.platform import Platform
from forkswarm.exit_codes import GENERAL_ERROR, ManifestWriteError
from forkswarm.infra.git_client import GitClient, GitResult
from forkswarm.services.publisher import ManifestPublisher, PublishOptions

from tests.git_helpers import commit_subjects, git, requires_git

ALICE = RepositoryIdentity("github.com", "alice", "project")
NOW = datetime(2024, 5, 17, 8, 30, 15, tzinfo=timezone.utc)
FORKS = ["bob/project", "carol/project", "dave/project"]


def make_manifest(forks=FORKS, now=NOW, platform=None):
    return build_manifest(ALICE, platform or Platform.GITHUB, forks, resolve_hasher(), now, "1.0.0")


def read_manifest(repo):
    return json.loads((repo / ".swarm" / "manifest.json").read_text())


@pytest.fixture
def mock_git():
    client = MagicMock(spec=GitClient)
    client.is_git_repo.return_value = True
    client.has_changes.return_value = True
    client.set_local_identity.return_value = True
    client.add.return_value = GitResult(0)
    client.commit.return_value = GitResult(0, "[main abc123] message")
    client.push.return_value = GitResult(0)
    return client


class TestPublishOptions:

    def test_from_config(self):
        config = {
            'manifest': {'path': 'meta/swarm.json'},
            'git': {'remote': 'upstream', 'user_name': 'Bot', 'user_email': 'bot@x', 'push': False},
        }
        options = PublishOptions.from_config(config, dry_run=True)
        assert options.manifest_path == 'meta/swarm.json'
        assert options.remote == 'upstream'
        assert options.user_name == 'Bot'
        assert options.push is False
        assert options.dry_run is True

    def test_defaults(self):
        options = PublishOptions.from_config({})
        assert options.manifest_path == '.swarm/manifest.json'
        assert options.remote == 'origin'
        assert options.push is True


class TestPublisherWithMockGit:

    def test_commit_message_and_scope(self, tmp_path, mock_git):
        publisher = ManifestPublisher(str(tmp_path), git_client=mock_git)
        result = publisher.publish(make_manifest())

        assert result.status == PublishStatus.PUSHED
        assert result.written and result.committed and result.pushed
        mock_git.add.assert_called_once_with(str(tmp_path), ".swarm")
        mock_git.commit.assert_called_once_with(
            str(tmp_path), "🐝 Swarm: Update topology (3 forks on github)", ".swarm"
        )
        mock_git.set_local_identity.assert_called_once_with(
            str(tmp_path), "Swarm Coordinator", "swarm@devswarm.local"
        )
        mock_git.push.assert_called_once_with(str(tmp_path), remote="origin")

    def test_writes_manifest_file(self, tmp_path, mock_git):
        ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())
        assert read_manifest(tmp_path)["swarm_topology"]["forks"] == FORKS

    def test_push_rejected_is_not_an_error(self, tmp_path, mock_git):
        mock_git.push.return_value = GitResult(128, "remote: Permission denied")
        result = ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.COMMITTED
        assert result.committed
        assert not result.pushed
        assert result.error is None

    def test_push_disabled(self, tmp_path, mock_git):
        options = PublishOptions(push=False)
        result = ManifestPublisher(str(tmp_path), options, git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.COMMITTED
        mock_git.push.assert_not_called()

    def test_nothing_to_commit_is_no_op(self, tmp_path, mock_git):
        mock_git.commit.return_value = GitResult(1, "On branch main\nnothing to commit, working tree clean")
        result = ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.NO_CHANGES
        assert result.error is None
        mock_git.push.assert_not_called()

    def test_commit_failure_is_reported(self, tmp_path, mock_git):
        mock_git.commit.return_value = GitResult(1, "error: gpg failed to sign the data")
        result = ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.COMMIT_FAILED
        assert "gpg failed" in result.error
        mock_git.push.assert_not_called()

    def test_add_failure_is_reported(self, tmp_path, mock_git):
        mock_git.add.return_value = GitResult(128, "fatal: index.lock exists")
        result = ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.COMMIT_FAILED
        mock_git.commit.assert_not_called()

    def test_no_working_tree_changes(self, tmp_path, mock_git):
        mock_git.has_changes.return_value = False
        result = ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.NO_CHANGES
        mock_git.commit.assert_not_called()

    def test_not_a_repository(self, tmp_path, mock_git):
        mock_git.is_git_repo.return_value = False
        result = ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.NOT_A_REPOSITORY
        assert result.written
        assert (tmp_path / ".swarm" / "manifest.json").exists()
        mock_git.commit.assert_not_called()

    def test_dry_run_touches_nothing(self, tmp_path, mock_git):
        options = PublishOptions(dry_run=True)
        result = ManifestPublisher(str(tmp_path), options, git_client=mock_git).publish(make_manifest())

        assert result.status == PublishStatus.DRY_RUN
        assert not (tmp_path / ".swarm").exists()
        mock_git.is_git_repo.assert_not_called()

    def test_timestamp_only_change_keeps_file(self, tmp_path, mock_git):
        publisher = ManifestPublisher(str(tmp_path), git_client=mock_git)
        publisher.publish(make_manifest())
        original = (tmp_path / ".swarm" / "manifest.json").read_text()

        result = publisher.publish(make_manifest(now=NOW + timedelta(days=1)))

        assert not result.written
        assert (tmp_path / ".swarm" / "manifest.json").read_text() == original

    def test_changed_forks_rewrite_file(self, tmp_path, mock_git):
        publisher = ManifestPublisher(str(tmp_path), git_client=mock_git)
        publisher.publish(make_manifest())
        result = publisher.publish(make_manifest(forks=FORKS + ["erin/project"], now=NOW + timedelta(days=1)))

        assert result.written
        manifest = read_manifest(tmp_path)
        assert manifest["swarm_topology"]["fork_count"] == 4
        assert manifest["updated_at"] == "2024-05-18T08:30:15Z"

    def test_corrupt_existing_manifest_is_replaced(self, tmp_path, mock_git):
        (tmp_path / ".swarm").mkdir()
        (tmp_path / ".swarm" / "manifest.json").write_text("{not json")
        result = ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert result.written
        assert read_manifest(tmp_path)["repository"] == "alice/project"

    def test_custom_manifest_path(self, tmp_path, mock_git):
        options = PublishOptions(manifest_path="meta/swarm.json")
        ManifestPublisher(str(tmp_path), options, git_client=mock_git).publish(make_manifest())

        assert (tmp_path / "meta" / "swarm.json").exists()
        mock_git.add.assert_called_once_with(str(tmp_path), "meta")

    def test_unwritable_manifest_raises(self, tmp_path, mock_git):
        # A directory where the file should go cannot be replaced by a file
        (tmp_path / ".swarm" / "manifest.json").mkdir(parents=True)

        with pytest.raises(ManifestWriteError) as excinfo:
            ManifestPublisher(str(tmp_path), git_client=mock_git).publish(make_manifest())

        assert excinfo.value.exit_code == GENERAL_ERROR
        mock_git.commit.assert_not_called()


@requires_git
class TestPublisherWithRealGit:

    def test_first_run_commits_and_pushes(self, github_repo, bare_remote):
        result = ManifestPublisher(str(github_repo)).publish(make_manifest())

        assert result.status == PublishStatus.PUSHED
        assert commit_subjects(github_repo)[0] == "🐝 Swarm: Update topology (3 forks on github)"
        assert git(github_repo, "log", "-1", "--format=%an <%ae>") == "Swarm Coordinator <swarm@devswarm.local>"
        assert git(bare_remote, "log", "--all", "--format=%s", "-1").startswith("🐝 Swarm")

    def test_identity_is_local_only(self, github_repo):
        ManifestPublisher(str(github_repo)).publish(make_manifest())
        assert git(github_repo, "config", "--local", "user.name") == "Swarm Coordinator"

    def test_second_identical_run_is_no_op(self, github_repo):
        publisher = ManifestPublisher(str(github_repo))
        publisher.publish(make_manifest())
        before = commit_subjects(github_repo)

        result = publisher.publish(make_manifest(now=NOW + timedelta(hours=6)))

        assert result.status == PublishStatus.NO_CHANGES
        assert commit_subjects(github_repo) == before

    def test_changed_topology_adds_one_commit(self, github_repo):
        publisher = ManifestPublisher(str(github_repo))
        publisher.publish(make_manifest())
        before = len(commit_subjects(github_repo))

        result = publisher.publish(make_manifest(forks=FORKS[:1], now=NOW + timedelta(hours=6)))

        assert result.status == PublishStatus.PUSHED
        subjects = commit_subjects(github_repo)
        assert len(subjects) == before + 1
        assert subjects[0] == "🐝 Swarm: Update topology (1 forks on github)"

    def test_push_failure_keeps_commit(self, git_repo, tmp_path):
        git(git_repo, "remote", "add", "origin", str(tmp_path / "does-not-exist.git"))
        result = ManifestPublisher(str(git_repo)).publish(make_manifest())

        assert result.status == PublishStatus.COMMITTED
        assert commit_subjects(git_repo)[0].startswith("🐝 Swarm")

    def test_other_changes_are_not_committed(self, github_repo):
        (github_repo / "notes.txt").write_text("work in progress\n")
        ManifestPublisher(str(github_repo)).publish(make_manifest())

        status = git(github_repo, "status", "--porcelain")
        assert "notes.txt" in status
        assert ".swarm" not in status

    def test_staged_changes_stay_out_of_bot_commit(self, github_repo):
        (github_repo / "secret.txt").write_text("do not publish\n")
        git(github_repo, "add", "secret.txt")

        result = ManifestPublisher(str(github_repo)).publish(make_manifest())

        assert result.committed
        committed = git(github_repo, "show", "--name-only", "--format=", "HEAD").splitlines()
        assert committed == [".swarm/manifest.json"]
        assert "A  secret.txt" in git(github_repo, "status", "--porcelain")

    def test_not_a_repository(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        result = ManifestPublisher(str(plain)).publish(make_manifest())

        assert result.status == PublishStatus.NOT_A_REPOSITORY
        assert (plain / ".swarm" / "manifest.json").exists()
