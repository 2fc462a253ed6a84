import time
from typing import Any

import click
from rich.console import Console

from branchfleet.cli.ensure import Ensure
from branchfleet.cli.output import format_run_summary, user_output
from branchfleet.core.config import (
    STRATEGY_NAMES,
    RunConfig,
    build_run_config,
    read_pyproject_defaults,
)
from branchfleet.core.context import BranchfleetContext
from branchfleet.core.engine import run_provisioning
from branchfleet.core.plan import plan_run


def _print_plan(config: RunConfig) -> None:
    user_output("(dry-run) Would create branches and commits (no changes made):")
    for action in plan_run(config):
        user_output(
            f'  - {action.branch}  -> commit msg: "{action.commit_message}"'
            f"  -> file: {action.metadata_path}"
        )


@click.command("create")
@click.option("-n", "--count", type=int, help="Number of branches to create (default: 200).")
@click.option("-p", "--prefix", help="Branch name prefix (default: dummy-).")
@click.option("-s", "--start", type=int, help="Start index (default: 1).")
@click.option("-b", "--base", help="Base branch to branch from (default: main).")
@click.option("-r", "--remote", help="Remote name to push to (default: origin).")
@click.option(
    "--push/--no-push",
    default=None,
    help="Push created branches, and already-existing local branches missing on the remote.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    # dry_run=False: Create branches by default
    default=False,
    help="Print branch names and actions without touching the repository.",
)
@click.option(
    "-f",
    "--file",
    "metadata_file",
    help="Repository path for per-branch metadata (default: .branch-info).",
)
@click.option(
    "-m",
    "--message",
    help="Commit message; {{BRANCH}} is replaced by the branch name.",
)
@click.option("-a", "--author-name", help="Commit author and committer name.")
@click.option("-e", "--author-email", help="Commit author and committer email.")
@click.option("--retries", type=int, help="Push attempts per branch (default: 3).")
@click.option(
    "--delay",
    type=float,
    help="Seconds between push attempts and between pushes (default: 1).",
)
@click.option("--batch", type=int, help="Pause after every N successful pushes (default: 20).")
@click.option("--batch-sleep", type=float, help="Seconds to pause after each batch (default: 5).")
@click.option(
    "--strategy",
    type=click.Choice(STRATEGY_NAMES),
    help="plumbing builds commits without checkout; worktree checks out each branch.",
)
@click.option(
    "--failed-log",
    help="File listing branches that failed this run (default: failed-branches.log).",
)
@click.pass_obj
def create_cmd(
    ctx: BranchfleetContext,
    count: int | None,
    prefix: str | None,
    start: int | None,
    base: str | None,
    remote: str | None,
    push: bool | None,
    dry_run: bool,
    metadata_file: str | None,
    message: str | None,
    author_name: str | None,
    author_email: str | None,
    retries: int | None,
    delay: float | None,
    batch: int | None,
    batch_sleep: float | None,
    strategy: str | None,
    failed_log: str | None,
) -> None:
    """Create many branches from a base, each with a unique metadata commit.

    Re-running is safe: existing branches are never recreated, and with
    --push, local branches missing on the remote are pushed again.

    Steps:
    1. Load defaults from [tool.branchfleet] in pyproject.toml
    2. Resolve the base branch (fetching it if needed)
    3. For each branch: create it if missing, push it if requested
    4. Summarize and log failures for a later re-run
    """
    repo_root = ctx.git.get_repository_root(ctx.cwd)

    overrides: dict[str, Any] = {
        "count": count,
        "prefix": prefix,
        "start": start,
        "base": base,
        "remote": remote,
        "push": push,
        "file": metadata_file,
        "message": message,
        "author_name": author_name,
        "author_email": author_email,
        "retries": retries,
        "delay": delay,
        "batch": batch,
        "batch_sleep": batch_sleep,
        "strategy": strategy,
        "failed_log": failed_log,
    }
    with Ensure.fatal_errors():
        file_defaults = read_pyproject_defaults(repo_root if repo_root is not None else ctx.cwd)
        config = build_run_config(overrides, file_defaults, cwd=ctx.cwd)

    user_output(f"Target branches: {config.branches.describe()}")
    if dry_run:
        _print_plan(config)
        return

    repo_root = Ensure.not_none(repo_root, "not inside a git repository.")

    started = time.monotonic()
    with Ensure.fatal_errors():
        report = run_provisioning(ctx.git, ctx.time, repo_root, config)

    user_output(f"Done. Processed branches: {config.branches.describe()}")
    Console(stderr=True).print(
        format_run_summary(report, push=config.push, duration=time.monotonic() - started)
    )
