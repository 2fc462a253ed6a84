"""Commit builder that goes through an ordinary checkout and commit.

Simpler than the plumbing builder but it mutates the shared working tree, so
branches are strictly serialized: the original checkout is restored before
the next branch is processed. Requires a clean working tree.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass

from branchfleet.cli.output import user_output
from branchfleet.core.builders.abc import CommitBuilder
from branchfleet.core.errors import BranchCreationError
from branchfleet.core.metadata import BranchMetadataPayload
from branchfleet.core.revisions import BaseReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OriginalCheckout:
    """What was checked out before a build started: a branch, or a detached commit."""

    branch: str | None
    commit: str | None


class WorktreeCommitBuilder(CommitBuilder):
    """Creates each branch with switch -c, writes the file, stages and commits it."""

    def build(self, base: BaseReference, branch: str, payload: BranchMetadataPayload) -> str:
        """Create branch at base, commit the metadata file on it, and switch back.

        On failure the partially created branch is removed so it stays missing.

        Raises:
            RuntimeError: If any git step fails
        """
        with self._restoring_checkout():
            self._git.checkout_new_branch(self._repo_root, branch, base.commit)
            try:
                (self._repo_root / self._metadata_path).parent.mkdir(parents=True, exist_ok=True)
                (self._repo_root / self._metadata_path).write_text(
                    payload.render(), encoding="utf-8"
                )
                self._git.stage_paths(self._repo_root, [self._metadata_path])
                return self._git.commit(
                    self._repo_root,
                    message=self.message_for(branch),
                    author=self._identity,
                    committer=self._identity,
                )
            except (RuntimeError, OSError):
                self._git.reset_hard(self._repo_root)
                self._abandon(branch)
                raise

    def _create(self, branch: str, payload: BranchMetadataPayload) -> str:
        try:
            commit = self.build(self._base, branch, payload)
        except (RuntimeError, OSError) as e:
            raise BranchCreationError(branch, str(e)) from e
        user_output(f"  committed on {branch}: {self._metadata_path} (token {payload.token})")
        return commit

    def _abandon(self, branch: str) -> None:
        """Step off a half-built branch and delete it."""
        self._git.checkout_detached(self._repo_root, self._base.commit)
        self._git.delete_branch(self._repo_root, branch, force=True)

    @contextmanager
    def _restoring_checkout(self) -> Generator[OriginalCheckout]:
        """Record the current checkout and restore it on exit (even if exception raised)."""
        original = OriginalCheckout(
            branch=self._git.get_current_branch(self._repo_root),
            commit=self._git.get_head_commit(self._repo_root),
        )
        try:
            yield original
        finally:
            self._restore(original)

    def _restore(self, original: OriginalCheckout) -> None:
        if original.branch is not None:
            logger.debug("Restoring original branch: %s", original.branch)
            self._git.checkout_branch(self._repo_root, original.branch)
        elif original.commit is not None:
            logger.debug("Restoring detached HEAD at %s", original.commit)
            self._git.checkout_detached(self._repo_root, original.commit)
