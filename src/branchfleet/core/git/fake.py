"""Fake git operations for testing.

FakeGit is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.

Objects are content-addressed the same way git addresses them (a hash over
the content), so two identical commits collapse onto one id here too.
"""

import hashlib
from dataclasses import dataclass
from pathlib import Path

from branchfleet.core.git.abc import CommitIdentity, Git, PushResult


@dataclass(frozen=True)
class FakeCommit:
    """A commit object held by FakeGit."""

    tree: str
    parent: str | None
    message: str
    author: CommitIdentity | None
    committer: CommitIdentity | None


def _object_id(kind: str, payload: str) -> str:
    return hashlib.sha1(f"{kind} {payload}".encode()).hexdigest()


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty dicts).
    """

    def __init__(
        self,
        *,
        repository_root: Path | None = None,
        branches: dict[str, str] | None = None,
        commits: dict[str, dict[str, str]] | None = None,
        remote_branches: dict[str, dict[str, str]] | None = None,
        push_results: dict[str, list[PushResult]] | None = None,
        current_branch: str | None = None,
        detached_head: str | None = None,
        dirty: bool = False,
        write_tree_raises: Exception | None = None,
        commit_raises: Exception | None = None,
        fetch_raises: Exception | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            repository_root: Value returned by get_repository_root()
            branches: Mapping of local branch name -> commit id
            commits: Mapping of commit id -> file contents (path -> text) for
                pre-existing commits. Commits referenced by branches but not
                listed here have an empty tree.
            remote_branches: Mapping of remote name -> (branch name -> commit id)
            push_results: Mapping of branch name -> scripted results consumed one
                per push attempt. Once exhausted, pushes succeed.
            current_branch: Branch checked out in the working tree
            detached_head: Commit checked out when current_branch is None
            dirty: Value returned by has_uncommitted_changes()
            write_tree_raises: Exception to raise when write_tree() is called
            commit_raises: Exception to raise when commit() is called
            fetch_raises: Exception to raise when fetch_ref() is called
        """
        self._repository_root = repository_root
        self._branches = dict(branches) if branches is not None else {}
        self._remote_branches = {
            remote: dict(refs) for remote, refs in (remote_branches or {}).items()
        }
        self._push_results = {
            branch: list(results) for branch, results in (push_results or {}).items()
        }
        self._current_branch = current_branch
        self._detached_head = detached_head if current_branch is None else None
        self._dirty = dirty
        self._write_tree_raises = write_tree_raises
        self._commit_raises = commit_raises
        self._fetch_raises = fetch_raises

        self._blobs: dict[str, str] = {}
        self._trees: dict[str, dict[str, str]] = {}
        self._commits: dict[str, FakeCommit] = {}
        self._indexes: dict[Path, dict[str, str]] = {}
        self._staged: list[str] = []

        self._push_calls: list[tuple[str, str, str]] = []
        self._fetch_calls: list[tuple[str, str]] = []
        self._index_paths: list[Path] = []
        self._mutations: list[tuple[str, ...]] = []

        seeded = dict(commits) if commits is not None else {}
        heads = [*self._branches.values(), *self._remote_shas()]
        if self._detached_head is not None:
            heads.append(self._detached_head)
        for sha in heads:
            seeded.setdefault(sha, {})
        for sha, files in seeded.items():
            tree = self._store_tree({path: self._store_blob(text) for path, text in files.items()})
            self._commits[sha] = FakeCommit(
                tree=tree, parent=None, message="", author=None, committer=None
            )

    # ------------------------------------------------------------------
    # Read-only views for test assertions
    # ------------------------------------------------------------------

    @property
    def branches(self) -> dict[str, str]:
        """Local branches (name -> commit id)."""
        return self._branches.copy()

    @property
    def remote_branches(self) -> dict[str, dict[str, str]]:
        """Remote branches per remote."""
        return {remote: refs.copy() for remote, refs in self._remote_branches.items()}

    @property
    def commits(self) -> dict[str, FakeCommit]:
        """All commit objects."""
        return self._commits.copy()

    @property
    def push_calls(self) -> list[tuple[str, str, str]]:
        """(remote, local_branch, remote_branch) for every push attempt."""
        return list(self._push_calls)

    @property
    def fetch_calls(self) -> list[tuple[str, str]]:
        """(remote, branch) for every fetch."""
        return list(self._fetch_calls)

    @property
    def index_paths(self) -> list[Path]:
        """Every index file a scratch index was built in, in order."""
        return list(self._index_paths)

    @property
    def mutations(self) -> list[tuple[str, ...]]:
        """Every repository-mutating call, in order."""
        return list(self._mutations)

    @property
    def current_branch(self) -> str | None:
        return self._current_branch

    def read_file(self, commit: str, path: str) -> str | None:
        """Return the content of path in commit's tree, or None if absent."""
        tree = self._trees[self._commits[commit].tree]
        blob = tree.get(path)
        if blob is None:
            return None
        return self._blobs[blob]

    # ------------------------------------------------------------------
    # Git interface
    # ------------------------------------------------------------------

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._repository_root

    def resolve_revision(self, repo_root: Path, rev: str) -> str | None:
        return self._resolve(rev)

    def ref_exists_local(self, repo_root: Path, branch: str) -> bool:
        return branch in self._branches

    def ref_exists_remote(self, repo_root: Path, remote: str, branch: str) -> bool:
        return branch in self._remote_branches.get(remote, {})

    def fetch_ref(self, repo_root: Path, remote: str, branch: str) -> None:
        self._fetch_calls.append((remote, branch))
        if self._fetch_raises is not None:
            raise self._fetch_raises
        sha = self._remote_branches.get(remote, {}).get(branch)
        if sha is None:
            raise RuntimeError(f"Failed to fetch branch '{branch}' from remote '{remote}'")
        self._mutations.append(("fetch_ref", remote, branch))
        self._branches[branch] = sha

    def read_tree_into_index(self, repo_root: Path, tree_ish: str, index: Path) -> None:
        sha = self._resolve(tree_ish)
        if sha is None:
            raise RuntimeError(f"Failed to read tree of '{tree_ish}' into scratch index")
        self._index_paths.append(index)
        self._indexes[index] = dict(self._trees[self._commits[sha].tree])

    def hash_object(self, repo_root: Path, content: str) -> str:
        self._mutations.append(("hash_object",))
        return self._store_blob(content)

    def update_index_entry(
        self,
        repo_root: Path,
        index: Path,
        *,
        blob: str,
        path: str,
        mode: str = "100644",
    ) -> None:
        if index not in self._indexes:
            raise RuntimeError(f"Failed to register '{path}' in scratch index: no index at {index}")
        self._indexes[index][path] = blob

    def write_tree(self, repo_root: Path, index: Path) -> str:
        if self._write_tree_raises is not None:
            raise self._write_tree_raises
        self._mutations.append(("write_tree",))
        return self._store_tree(self._indexes[index])

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
        self._mutations.append(("create_commit", tree, parent))
        return self._store_commit(
            FakeCommit(
                tree=tree, parent=parent, message=message, author=author, committer=committer
            )
        )

    def create_ref(self, repo_root: Path, branch: str, commit: str) -> None:
        if branch in self._branches:
            raise RuntimeError(f"Failed to create branch ref '{branch}': reference already exists")
        self._mutations.append(("create_ref", branch, commit))
        self._branches[branch] = commit

    def push_ref(
        self,
        repo_root: Path,
        remote: str,
        local_branch: str,
        remote_branch: str,
    ) -> PushResult:
        self._push_calls.append((remote, local_branch, remote_branch))
        scripted = self._push_results.get(local_branch)
        if scripted:
            result = scripted.pop(0)
        elif local_branch not in self._branches:
            result = PushResult.REJECTED
        else:
            result = PushResult.PUSHED
        if result is PushResult.PUSHED:
            self._mutations.append(("push_ref", remote, remote_branch))
            self._remote_branches.setdefault(remote, {})[remote_branch] = self._branches[
                local_branch
            ]
        return result

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branch

    def get_head_commit(self, cwd: Path) -> str | None:
        if self._current_branch is not None:
            return self._branches.get(self._current_branch)
        return self._detached_head

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        return self._dirty

    def checkout_new_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        if branch in self._branches:
            raise RuntimeError(f"Failed to create branch '{branch}': already exists")
        sha = self._resolve(start_point)
        if sha is None:
            raise RuntimeError(f"Failed to create branch '{branch}': unknown start '{start_point}'")
        self._mutations.append(("checkout_new_branch", branch, sha))
        self._branches[branch] = sha
        self._current_branch = branch
        self._detached_head = None

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        if branch not in self._branches:
            raise RuntimeError(f"Failed to switch to branch '{branch}': no such branch")
        self._mutations.append(("checkout_branch", branch))
        self._current_branch = branch
        self._detached_head = None

    def checkout_detached(self, cwd: Path, ref: str) -> None:
        sha = self._resolve(ref)
        if sha is None:
            raise RuntimeError(f"Failed to checkout detached HEAD at '{ref}'")
        self._mutations.append(("checkout_detached", sha))
        self._current_branch = None
        self._detached_head = sha

    def stage_paths(self, cwd: Path, paths: list[str]) -> None:
        self._mutations.append(("stage_paths", *paths))
        self._staged.extend(paths)

    def commit(
        self,
        cwd: Path,
        *,
        message: str,
        author: CommitIdentity,
        committer: CommitIdentity,
    ) -> str:
        if self._commit_raises is not None:
            raise self._commit_raises
        head = self.get_head_commit(cwd)
        if head is None:
            raise RuntimeError("Failed to commit staged changes: no HEAD")
        entries = dict(self._trees[self._commits[head].tree])
        for path in self._staged:
            entries[path] = self._store_blob((cwd / path).read_text(encoding="utf-8"))
        self._staged = []
        sha = self._store_commit(
            FakeCommit(
                tree=self._store_tree(entries),
                parent=head,
                message=message,
                author=author,
                committer=committer,
            )
        )
        self._mutations.append(("commit", sha))
        if self._current_branch is not None:
            self._branches[self._current_branch] = sha
        else:
            self._detached_head = sha
        return sha

    def reset_hard(self, cwd: Path) -> None:
        self._mutations.append(("reset_hard",))
        self._staged = []

    def delete_branch(self, cwd: Path, branch: str, *, force: bool) -> None:
        if branch not in self._branches:
            raise RuntimeError(f"Failed to delete branch '{branch}': no such branch")
        if branch == self._current_branch:
            raise RuntimeError(f"Failed to delete branch '{branch}': checked out")
        self._mutations.append(("delete_branch", branch))
        del self._branches[branch]

    # ------------------------------------------------------------------
    # Object store
    # ------------------------------------------------------------------

    def _remote_shas(self) -> list[str]:
        return [sha for refs in self._remote_branches.values() for sha in refs.values()]

    def _resolve(self, rev: str) -> str | None:
        if rev in self._branches:
            return self._branches[rev]
        if rev in self._commits:
            return rev
        return None

    def _store_blob(self, content: str) -> str:
        blob = _object_id("blob", content)
        self._blobs[blob] = content
        return blob

    def _store_tree(self, entries: dict[str, str]) -> str:
        tree = _object_id("tree", repr(sorted(entries.items())))
        self._trees[tree] = dict(entries)
        return tree

    def _store_commit(self, commit: FakeCommit) -> str:
        sha = _object_id("commit", repr(commit))
        self._commits[sha] = commit
        return sha
