"""Interchangeable commit-building strategies, selected once per run."""

from branchfleet.core.builders.abc import (
    BuildResult,
    CommitBuilder,
    CommitCreated,
    CommitFailed,
)
from branchfleet.core.builders.plumbing import PlumbingCommitBuilder, scratch_index
from branchfleet.core.builders.worktree import WorktreeCommitBuilder

STRATEGIES: dict[str, type[CommitBuilder]] = {
    "plumbing": PlumbingCommitBuilder,
    "worktree": WorktreeCommitBuilder,
}

__all__ = [
    "STRATEGIES",
    "BuildResult",
    "CommitBuilder",
    "CommitCreated",
    "CommitFailed",
    "PlumbingCommitBuilder",
    "WorktreeCommitBuilder",
    "scratch_index",
]
