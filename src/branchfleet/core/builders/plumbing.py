"""Commit builder that never touches the checked-out working tree.

Each commit is assembled in a private scratch index populated from the base
commit's tree, so any number of branches can be provisioned without
disturbing whatever is checked out and without contending for the
repository's shared index.
"""

import logging
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from branchfleet.cli.output import user_output
from branchfleet.core.builders.abc import CommitBuilder
from branchfleet.core.errors import BranchCreationError
from branchfleet.core.metadata import BranchMetadataPayload
from branchfleet.core.revisions import BaseReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScratchIndexHandle:
    """Location of an index file private to one commit build."""

    path: Path


@contextmanager
def scratch_index() -> Generator[ScratchIndexHandle]:
    """Acquire a fresh scratch index, removed on exit (even if exception raised).

    The index file itself is not created; git creates it on first write,
    which avoids handing git an empty file it would reject as corrupt.
    """
    with tempfile.TemporaryDirectory(prefix="branchfleet-index-") as tmp:
        yield ScratchIndexHandle(path=Path(tmp) / "index")


class PlumbingCommitBuilder(CommitBuilder):
    """Builds blob, tree and commit objects directly, then creates the ref."""

    def build_commit(self, base: BaseReference, payload: BranchMetadataPayload) -> str:
        """Create a commit on base whose only change is the metadata file.

        No ref is touched here.

        Raises:
            RuntimeError: If any git step fails
        """
        with scratch_index() as index:
            self._git.read_tree_into_index(self._repo_root, base.commit, index.path)
            blob = self._git.hash_object(self._repo_root, payload.render())
            self._git.update_index_entry(
                self._repo_root, index.path, blob=blob, path=self._metadata_path
            )
            tree = self._git.write_tree(self._repo_root, index.path)
            return self._git.create_commit(
                self._repo_root,
                tree=tree,
                parent=base.commit,
                author=self._identity,
                committer=self._identity,
                message=self.message_for(payload.branch),
            )

    def _create(self, branch: str, payload: BranchMetadataPayload) -> str:
        try:
            commit = self.build_commit(self._base, payload)
            self._git.create_ref(self._repo_root, branch, commit)
        except RuntimeError as e:
            raise BranchCreationError(branch, str(e)) from e
        user_output(f"  created branch {branch} -> commit {commit} (token {payload.token})")
        return commit
