"""Publishing branches with bounded retries and batch cooldowns.

RetryPolicy is a pure decision function over the attempt history; the
PushCoordinator applies it against the git layer and the clock.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from branchfleet.cli.output import user_output
from branchfleet.core.errors import PushExhaustedError, TransientPushFailure
from branchfleet.core.git.abc import Git, PushResult
from branchfleet.core.time.abc import Time

logger = logging.getLogger(__name__)


class RetryAction(Enum):
    RETRY = "retry"
    SUCCEED = "succeed"
    EXHAUST = "exhaust"


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to attempt a push and how long to wait between attempts."""

    max_attempts: int
    delay: float

    def next_action(self, history: Sequence[PushResult]) -> RetryAction:
        """Decide what to do given the results of the attempts made so far.

        Args:
            history: Result of every attempt so far, oldest first

        Returns:
            SUCCEED once an attempt pushed, EXHAUST once the budget is spent,
            otherwise RETRY (including before the first attempt)
        """
        if history and history[-1] is PushResult.PUSHED:
            return RetryAction.SUCCEED
        if len(history) >= self.max_attempts:
            return RetryAction.EXHAUST
        return RetryAction.RETRY


class PushOutcome(Enum):
    PUSHED = "pushed"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class PushReport:
    """Result of pushing one branch with retries."""

    branch: str
    outcome: PushOutcome
    history: tuple[PushResult, ...]
    error: PushExhaustedError | None = None

    @property
    def attempts(self) -> int:
        return len(self.history)

    @property
    def pushed(self) -> bool:
        return self.outcome is PushOutcome.PUSHED


def has_batch_threshold_reached(success_count: int, batch_size: int) -> bool:
    """True right after every batch_size-th successful push."""
    return success_count > 0 and success_count % batch_size == 0


class PushCoordinator:
    """Pushes one ref to one remote at a time under a RetryPolicy."""

    def __init__(self, git: Git, time: Time) -> None:
        self._git = git
        self._time = time

    def push_with_retries(
        self,
        repo_root: Path,
        branch: str,
        remote: str,
        policy: RetryPolicy,
    ) -> PushReport:
        """Push branch to the same-named branch on remote.

        Never raises for push failures: every failure reason is treated as
        transient until the attempt budget runs out, and exhaustion is reported
        through the returned PushReport.
        """
        history: list[PushResult] = []
        while True:
            action = policy.next_action(history)
            if action is RetryAction.SUCCEED:
                user_output(f"    pushed: {remote}/{branch}")
                return PushReport(branch=branch, outcome=PushOutcome.PUSHED, history=tuple(history))
            if action is RetryAction.EXHAUST:
                error = PushExhaustedError(branch, remote, len(history))
                user_output(f"  {error}")
                return PushReport(
                    branch=branch,
                    outcome=PushOutcome.EXHAUSTED,
                    history=tuple(history),
                    error=error,
                )

            if history:
                self._time.sleep(policy.delay)
            attempt = len(history) + 1
            user_output(f"  push attempt {attempt}/{policy.max_attempts} for {branch} ...")
            result = self._git.push_ref(repo_root, remote, branch, branch)
            history.append(result)
            if result is not PushResult.PUSHED:
                logger.debug("%s", TransientPushFailure(branch, attempt, result))

    def pause(self, duration: float) -> None:
        """Cooldown between batches to ease remote-side rate limiting."""
        self._time.sleep(duration)
