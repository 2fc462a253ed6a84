"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import os
import subprocess
from pathlib import Path

from branchfleet.core.git.abc import CommitIdentity, Git, PushResult
from branchfleet.core.subprocess import run_subprocess_with_context

# ============================================================================
# Production Implementation
# ============================================================================


def _index_env(index: Path) -> dict[str, str]:
    """Environment for a single git call that must use a private index file."""
    return {**os.environ, "GIT_INDEX_FILE": str(index)}


def _identity_env(author: CommitIdentity, committer: CommitIdentity) -> dict[str, str]:
    return {**os.environ, **author.as_env("author"), **committer.as_env("committer")}


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the repository containing cwd."""
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip()).resolve()

    def resolve_revision(self, repo_root: Path, rev: str) -> str | None:
        """Resolve a revision to a commit SHA (peeling tags)."""
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def ref_exists_local(self, repo_root: Path, branch: str) -> bool:
        """Check whether refs/heads/<branch> exists locally."""
        result = subprocess.run(
            ["git", "show-ref", "--verify", "--quiet", f"refs/heads/{branch}"],
            cwd=repo_root,
            capture_output=True,
            check=False,
        )
        return result.returncode == 0

    def ref_exists_remote(self, repo_root: Path, remote: str, branch: str) -> bool:
        """Check whether the remote has refs/heads/<branch>."""
        result = subprocess.run(
            ["git", "ls-remote", "--heads", remote, f"refs/heads/{branch}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return False
        return bool(result.stdout.strip())

    def fetch_ref(self, repo_root: Path, remote: str, branch: str) -> None:
        """Fetch <branch> from <remote> into the local branch of the same name."""
        run_subprocess_with_context(
            ["git", "fetch", remote, f"{branch}:{branch}"],
            operation_context=f"fetch branch '{branch}' from remote '{remote}'",
            cwd=repo_root,
        )

    def read_tree_into_index(self, repo_root: Path, tree_ish: str, index: Path) -> None:
        """Populate a private index file from a tree."""
        run_subprocess_with_context(
            ["git", "read-tree", f"{tree_ish}^{{tree}}"],
            operation_context=f"read tree of '{tree_ish}' into scratch index",
            cwd=repo_root,
            env=_index_env(index),
        )

    def hash_object(self, repo_root: Path, content: str) -> str:
        """Write content as a blob object and return its id."""
        result = run_subprocess_with_context(
            ["git", "hash-object", "-w", "--stdin"],
            operation_context="write blob object",
            cwd=repo_root,
            input=content,
        )
        return result.stdout.strip()

    def update_index_entry(
        self,
        repo_root: Path,
        index: Path,
        *,
        blob: str,
        path: str,
        mode: str = "100644",
    ) -> None:
        """Register blob at path in the given index."""
        run_subprocess_with_context(
            ["git", "update-index", "--add", "--cacheinfo", f"{mode},{blob},{path}"],
            operation_context=f"register '{path}' in scratch index",
            cwd=repo_root,
            env=_index_env(index),
        )

    def write_tree(self, repo_root: Path, index: Path) -> str:
        """Write a tree object from the given index."""
        result = run_subprocess_with_context(
            ["git", "write-tree"],
            operation_context="write tree from scratch index",
            cwd=repo_root,
            env=_index_env(index),
        )
        return result.stdout.strip()

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
        """Create a commit object with a single parent."""
        result = run_subprocess_with_context(
            ["git", "commit-tree", tree, "-p", parent],
            operation_context=f"create commit for tree {tree}",
            cwd=repo_root,
            env=_identity_env(author, committer),
            input=message + "\n",
        )
        return result.stdout.strip()

    def create_ref(self, repo_root: Path, branch: str, commit: str) -> None:
        """Create refs/heads/<branch>, failing if it already exists."""
        # An empty old value makes update-ref refuse to touch an existing ref
        run_subprocess_with_context(
            ["git", "update-ref", f"refs/heads/{branch}", commit, ""],
            operation_context=f"create branch ref '{branch}'",
            cwd=repo_root,
        )

    def push_ref(
        self,
        repo_root: Path,
        remote: str,
        local_branch: str,
        remote_branch: str,
    ) -> PushResult:
        """Push one local branch to one remote branch, a single attempt."""
        result = subprocess.run(
            [
                "git",
                "push",
                "--set-upstream",
                remote,
                f"refs/heads/{local_branch}:refs/heads/{remote_branch}",
            ],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode == 0:
            return PushResult.PUSHED
        if "rejected" in result.stderr:
            return PushResult.REJECTED
        return PushResult.NETWORK_ERROR

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "symbolic-ref", "--quiet", "--short", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def get_head_commit(self, cwd: Path) -> str | None:
        """Get the commit SHA HEAD points at."""
        return self.resolve_revision(cwd, "HEAD")

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check if tracked files have staged or unstaged changes."""
        result = subprocess.run(
            ["git", "status", "--porcelain", "--untracked-files=no"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return False
        return bool(result.stdout.strip())

    def checkout_new_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        """Create branch at start_point and switch to it."""
        run_subprocess_with_context(
            ["git", "switch", "--quiet", "-c", branch, start_point],
            operation_context=f"create and switch to branch '{branch}' at '{start_point}'",
            cwd=cwd,
        )

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Switch to an existing branch."""
        run_subprocess_with_context(
            ["git", "switch", "--quiet", branch],
            operation_context=f"switch to branch '{branch}'",
            cwd=cwd,
        )

    def checkout_detached(self, cwd: Path, ref: str) -> None:
        """Checkout a detached HEAD at the given ref."""
        run_subprocess_with_context(
            ["git", "switch", "--quiet", "--detach", ref],
            operation_context=f"checkout detached HEAD at '{ref}'",
            cwd=cwd,
        )

    def stage_paths(self, cwd: Path, paths: list[str]) -> None:
        """Stage the given paths, ignoring .gitignore rules."""
        run_subprocess_with_context(
            ["git", "add", "--force", "--", *paths],
            operation_context=f"stage {', '.join(paths)}",
            cwd=cwd,
        )

    def commit(
        self,
        cwd: Path,
        *,
        message: str,
        author: CommitIdentity,
        committer: CommitIdentity,
    ) -> str:
        """Commit the staged changes without running hooks."""
        run_subprocess_with_context(
            ["git", "commit", "--quiet", "--no-verify", "-m", message],
            operation_context="commit staged changes",
            cwd=cwd,
            env=_identity_env(author, committer),
        )
        head = self.get_head_commit(cwd)
        if head is None:
            raise RuntimeError(f"Failed to resolve HEAD after commit in {cwd}")
        return head

    def reset_hard(self, cwd: Path) -> None:
        """Discard all staged and unstaged changes to tracked files."""
        run_subprocess_with_context(
            ["git", "reset", "--quiet", "--hard"],
            operation_context="reset working tree",
            cwd=cwd,
        )

    def delete_branch(self, cwd: Path, branch: str, *, force: bool) -> None:
        """Delete a local branch."""
        flag = "-D" if force else "-d"
        run_subprocess_with_context(
            ["git", "branch", flag, branch],
            operation_context=f"delete branch '{branch}'",
            cwd=cwd,
        )
