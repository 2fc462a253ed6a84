"""Commit builder interface and the per-branch result type.

A commit builder turns a missing branch into a local branch carrying one fresh
metadata commit on top of the base revision. Builders never raise for a single
branch's failure: provision() returns CommitFailed instead, which the
provisioning engine records before moving on.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from branchfleet.core.errors import BranchCreationError
from branchfleet.core.git.abc import CommitIdentity, Git
from branchfleet.core.metadata import BranchMetadataPayload, render_commit_message
from branchfleet.core.revisions import BaseReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitCreated:
    branch: str
    commit: str


@dataclass(frozen=True)
class CommitFailed:
    branch: str
    reason: str


BuildResult = CommitCreated | CommitFailed


class CommitBuilder(ABC):
    """Strategy for creating a branch with a metadata commit on the base revision."""

    def __init__(
        self,
        git: Git,
        repo_root: Path,
        *,
        base: BaseReference,
        metadata_path: str,
        message_template: str,
        identity: CommitIdentity,
    ) -> None:
        self._git = git
        self._repo_root = repo_root
        self._base = base
        self._metadata_path = metadata_path
        self._message_template = message_template
        self._identity = identity

    def provision(self, branch: str, payload: BranchMetadataPayload) -> BuildResult:
        """Create branch with a commit holding payload, or report why it failed."""
        try:
            commit = self._create(branch, payload)
        except BranchCreationError as e:
            logger.debug("Builder failed for %s: %s", branch, e)
            return CommitFailed(branch=branch, reason=e.reason)
        return CommitCreated(branch=branch, commit=commit)

    def message_for(self, branch: str) -> str:
        return render_commit_message(self._message_template, branch)

    @abstractmethod
    def _create(self, branch: str, payload: BranchMetadataPayload) -> str:
        """Create the branch and return its new commit.

        Raises:
            BranchCreationError: If any step fails; the branch must be left missing
        """
        ...
