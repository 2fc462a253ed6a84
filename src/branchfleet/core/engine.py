"""The provisioning engine: per-branch state machine over a batch of names.

For every name, in order, the engine re-derives the branch's state from the
repository and acts on it:

- MISSING: build the branch with the selected commit builder, then push it
  if the run pushes.
- LOCAL_ONLY: push the existing branch if the run pushes; never add a commit.
- LOCAL_AND_REMOTE: nothing to do.

State is never carried over from an earlier run, so rerunning with the same
configuration is safe and converges on the same end state. A failure on one
branch is recorded and the batch continues.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from branchfleet.cli.output import user_output
from branchfleet.core.builders import STRATEGIES
from branchfleet.core.builders.abc import CommitBuilder, CommitCreated, CommitFailed
from branchfleet.core.config import RunConfig
from branchfleet.core.errors import ConfigurationError
from branchfleet.core.git.abc import Git
from branchfleet.core.metadata import BranchMetadataPayload
from branchfleet.core.push import PushCoordinator, has_batch_threshold_reached
from branchfleet.core.report import FailureLog, RunReport, RunResult
from branchfleet.core.revisions import resolve_base
from branchfleet.core.time.abc import Time

logger = logging.getLogger(__name__)


class BranchState(Enum):
    MISSING = "missing"
    LOCAL_ONLY = "local_only"
    LOCAL_AND_REMOTE = "local_and_remote"


def classify_branch(
    git: Git,
    repo_root: Path,
    branch: str,
    *,
    remote: str,
    check_remote: bool,
) -> BranchState:
    """Derive a branch's state from the repository.

    The remote is only queried when check_remote is set. Without it a local
    branch is reported as LOCAL_ONLY, which leads to the same action (none)
    when the run does not push.
    """
    if not git.ref_exists_local(repo_root, branch):
        return BranchState.MISSING
    if check_remote and git.ref_exists_remote(repo_root, remote, branch):
        return BranchState.LOCAL_AND_REMOTE
    return BranchState.LOCAL_ONLY


class ProvisioningEngine:
    """Drives one run: classify, build, push, record, for each branch name."""

    def __init__(
        self,
        *,
        git: Git,
        repo_root: Path,
        builder: CommitBuilder,
        pusher: PushCoordinator,
        time: Time,
        config: RunConfig,
        failure_log: FailureLog | None,
    ) -> None:
        self._git = git
        self._repo_root = repo_root
        self._builder = builder
        self._pusher = pusher
        self._time = time
        self._config = config
        self._failure_log = failure_log

    def run(self, names: Iterable[str]) -> RunReport:
        """Process every name in order and return the final report.

        Never stops early because a single branch failed.
        """
        result = RunResult()
        if self._failure_log is not None:
            self._failure_log.reset()

        for branch in names:
            user_output(f"==== Processing: {branch} ====")
            self._process(branch, result)

        return result.finalize(self._failure_log.path if self._failure_log is not None else None)

    def _process(self, branch: str, result: RunResult) -> None:
        try:
            state = classify_branch(
                self._git,
                self._repo_root,
                branch,
                remote=self._config.remote,
                check_remote=self._config.push,
            )
        except RuntimeError as e:
            self._fail(branch, result, f"could not inspect refs: {e}")
            return
        logger.debug("%s classified as %s", branch, state.value)

        if state is BranchState.LOCAL_AND_REMOTE:
            user_output(f"  remote already has {branch}, nothing to do.")
            result.already_complete.append(branch)
            return

        if state is BranchState.LOCAL_ONLY:
            if not self._config.push:
                user_output(f"  local branch exists: {branch} (not pushing; use --push to push)")
                result.skipped.append(branch)
                return
            user_output(f"  remote missing {branch} -> attempting to push with retries...")
            self._push(branch, result)
            return

        payload = BranchMetadataPayload.generate(branch, self._config.base, self._time.now())
        match self._builder.provision(branch, payload):
            case CommitFailed(reason=reason):
                self._fail(branch, result, reason)
                return
            case CommitCreated(commit=commit):
                logger.debug("%s created at %s", branch, commit)
                result.created.append(branch)

        if self._config.push:
            self._push(branch, result)

    def _push(self, branch: str, result: RunResult) -> None:
        report = self._pusher.push_with_retries(
            self._repo_root, branch, self._config.remote, self._config.retry_policy
        )
        if report.pushed:
            result.pushed.append(branch)
        else:
            self._fail(branch, result, str(report.error))

        # Be gentle with the remote between consecutive pushes
        self._time.sleep(self._config.retry_policy.delay)

        batch_size = self._config.batch_size
        if report.pushed and has_batch_threshold_reached(result.push_count, batch_size):
            user_output(
                f"Completed {result.push_count} pushes so far - sleeping "
                f"{self._config.batch_cooldown:g}s to reduce rate-limit risk..."
            )
            self._pusher.pause(self._config.batch_cooldown)

    def _fail(self, branch: str, result: RunResult, reason: str) -> None:
        user_output(f"FAILED: {branch}: {reason}")
        if result.record_failure(branch) and self._failure_log is not None:
            self._failure_log.append(branch)


def run_provisioning(git: Git, time: Time, repo_root: Path, config: RunConfig) -> RunReport:
    """Wire up a run from its configuration and execute it.

    Raises:
        ConfigurationError: If the worktree strategy is selected on a dirty tree
        BaseResolutionError: If the base cannot be resolved or fetched
    """
    if config.strategy == "worktree" and git.has_uncommitted_changes(repo_root):
        raise ConfigurationError(
            "The worktree strategy needs a clean working tree. "
            "Commit or stash your changes, or use --strategy plumbing."
        )

    base = resolve_base(git, repo_root, config.base, config.remote)
    user_output(f"Using base branch '{base.name}' -> {base.commit}")

    builder = STRATEGIES[config.strategy](
        git,
        repo_root,
        base=base,
        metadata_path=config.metadata_path,
        message_template=config.message_template,
        identity=config.identity,
    )
    engine = ProvisioningEngine(
        git=git,
        repo_root=repo_root,
        builder=builder,
        pusher=PushCoordinator(git, time),
        time=time,
        config=config,
        failure_log=FailureLog(config.failed_log),
    )
    return engine.run(config.branches.names())
