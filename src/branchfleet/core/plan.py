"""Dry-run planning: what a run would do, computed without touching the repository."""

from dataclasses import dataclass

from branchfleet.core.config import RunConfig
from branchfleet.core.metadata import render_commit_message


@dataclass(frozen=True)
class PlannedAction:
    branch: str
    commit_message: str
    metadata_path: str


def plan_run(config: RunConfig) -> list[PlannedAction]:
    """One action per branch name, in processing order."""
    return [
        PlannedAction(
            branch=branch,
            commit_message=render_commit_message(config.message_template, branch),
            metadata_path=config.metadata_path,
        )
        for branch in config.branches.names()
    ]
