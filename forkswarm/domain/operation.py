"""
Publish result domain objects for forkswarm.

Describes what happened when the manifest was persisted: whether the file
was written, whether a commit was made, and whether it was pushed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class PublishStatus(Enum):
    """Outcome of a publish attempt."""
    PUSHED = "pushed"
    COMMITTED = "committed"        # Commit made, push skipped or rejected
    NO_CHANGES = "no_changes"
    COMMIT_FAILED = "commit_failed"
    NOT_A_REPOSITORY = "not_a_repository"
    DRY_RUN = "dry_run"


@dataclass
class PublishResult:
    """
    Result of persisting a manifest.

    None of these outcomes is an error for the run; only a failure to
    write the file aborts, and that is raised instead of returned.
    """
    status: PublishStatus
    manifest_path: str
    written: bool = False
    committed: bool = False
    pushed: bool = False
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'status': self.status.value,
            'manifest_path': self.manifest_path,
            'written': self.written,
            'committed': self.committed,
            'pushed': self.pushed,
        }
        if self.message:
            result['message'] = self.message
        if self.error:
            result['error'] = self.error
        return result
