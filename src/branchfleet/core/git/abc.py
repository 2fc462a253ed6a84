"""High-level git operations interface.

This module provides a clean abstraction over the git plumbing and porcelain
commands the provisioning engine needs, making the engine testable without a
real repository.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation for tests

No operation here retries. Retry policy lives in branchfleet.core.push.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class CommitIdentity:
    """Name and email recorded as author or committer of a commit."""

    name: str
    email: str

    def as_env(self, role: str) -> dict[str, str]:
        """Render as GIT_<ROLE>_NAME / GIT_<ROLE>_EMAIL environment entries.

        Args:
            role: Either "author" or "committer"
        """
        prefix = f"GIT_{role.upper()}"
        return {f"{prefix}_NAME": self.name, f"{prefix}_EMAIL": self.email}


class PushResult(Enum):
    """Outcome of a single push attempt."""

    PUSHED = "pushed"
    REJECTED = "rejected"
    NETWORK_ERROR = "network_error"


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    # Repository discovery and refs

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the repository containing cwd.

        Returns:
            Repository root, or None if cwd is not inside a git work tree
        """
        ...

    @abstractmethod
    def resolve_revision(self, repo_root: Path, rev: str) -> str | None:
        """Resolve a revision to a commit SHA.

        Args:
            repo_root: Path to the repository root
            rev: Branch name, tag or SHA

        Returns:
            Full commit SHA, or None if rev does not name a commit
        """
        ...

    @abstractmethod
    def ref_exists_local(self, repo_root: Path, branch: str) -> bool:
        """Check whether refs/heads/<branch> exists locally."""
        ...

    @abstractmethod
    def ref_exists_remote(self, repo_root: Path, remote: str, branch: str) -> bool:
        """Check whether the remote has refs/heads/<branch>.

        Queries the remote without fetching objects. A failed query is
        reported as False.
        """
        ...

    @abstractmethod
    def fetch_ref(self, repo_root: Path, remote: str, branch: str) -> None:
        """Fetch <branch> from <remote> into the local branch of the same name.

        Raises:
            RuntimeError: If the fetch fails
        """
        ...

    # Object and index plumbing

    @abstractmethod
    def read_tree_into_index(self, repo_root: Path, tree_ish: str, index: Path) -> None:
        """Populate the index file at `index` from a tree.

        Args:
            repo_root: Path to the repository root
            tree_ish: Tree or commit whose tree should be read
            index: Index file to populate (never the repository's shared index)
        """
        ...

    @abstractmethod
    def hash_object(self, repo_root: Path, content: str) -> str:
        """Write content as a blob object and return its id."""
        ...

    @abstractmethod
    def update_index_entry(
        self,
        repo_root: Path,
        index: Path,
        *,
        blob: str,
        path: str,
        mode: str = "100644",
    ) -> None:
        """Register blob at path in the given index, replacing any existing entry."""
        ...

    @abstractmethod
    def write_tree(self, repo_root: Path, index: Path) -> str:
        """Write a tree object from the given index and return its id."""
        ...

    @abstractmethod
    def create_commit(
        self,
        repo_root: Path,
        *,
        tree: str,
        parent: str,
        author: CommitIdentity,
        committer: CommitIdentity,
        message: str,
    ) -> str:
        """Create a commit object with a single parent and return its id."""
        ...

    @abstractmethod
    def create_ref(self, repo_root: Path, branch: str, commit: str) -> None:
        """Create refs/heads/<branch> pointing at commit.

        Creation is create-only: an existing ref is never overwritten.

        Raises:
            RuntimeError: If the ref already exists or cannot be written
        """
        ...

    # Publishing

    @abstractmethod
    def push_ref(
        self,
        repo_root: Path,
        remote: str,
        local_branch: str,
        remote_branch: str,
    ) -> PushResult:
        """Push one local branch to one remote branch, a single attempt."""
        ...

    # Working tree operations

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch, or None when HEAD is detached."""
        ...

    @abstractmethod
    def get_head_commit(self, cwd: Path) -> str | None:
        """Get the commit SHA HEAD points at."""
        ...

    @abstractmethod
    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check if tracked files have staged or unstaged changes (untracked files ignored)."""
        ...

    @abstractmethod
    def checkout_new_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        """Create branch at start_point and switch to it."""
        ...

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Switch to an existing branch."""
        ...

    @abstractmethod
    def checkout_detached(self, cwd: Path, ref: str) -> None:
        """Checkout a detached HEAD at the given ref."""
        ...

    @abstractmethod
    def stage_paths(self, cwd: Path, paths: list[str]) -> None:
        """Stage the given paths, ignoring .gitignore rules."""
        ...

    @abstractmethod
    def commit(
        self,
        cwd: Path,
        *,
        message: str,
        author: CommitIdentity,
        committer: CommitIdentity,
    ) -> str:
        """Commit the staged changes without running hooks and return the new SHA."""
        ...

    @abstractmethod
    def reset_hard(self, cwd: Path) -> None:
        """Discard all staged and unstaged changes to tracked files."""
        ...

    @abstractmethod
    def delete_branch(self, cwd: Path, branch: str, *, force: bool) -> None:
        """Delete a local branch."""
        ...
