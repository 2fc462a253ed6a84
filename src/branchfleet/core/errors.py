"""Error taxonomy for branch provisioning.

Fatal errors (ConfigurationError, BaseResolutionError) abort the run before or
at its start. Per-branch errors (BranchCreationError, PushExhaustedError,
TransientPushFailure) are caught at the provisioning engine boundary and never
abort the run.
"""

from branchfleet.core.git.abc import PushResult


class BranchfleetError(Exception):
    """Base class for all branchfleet errors."""


class ConfigurationError(BranchfleetError):
    """Run parameters are invalid; raised before any branch is touched."""


class BaseResolutionError(BranchfleetError):
    """The base branch could not be resolved locally or fetched from the remote."""

    def __init__(self, base: str, remote: str, detail: str | None = None) -> None:
        message = f"Base branch '{base}' not found locally and could not be fetched from '{remote}'"
        if detail:
            message += f"\n{detail}"
        super().__init__(message)
        self.base = base
        self.remote = remote


class BranchCreationError(BranchfleetError):
    """Building the commit, tree or ref for one branch failed."""

    def __init__(self, branch: str, reason: str) -> None:
        super().__init__(f"Failed to create branch '{branch}': {reason}")
        self.branch = branch
        self.reason = reason


class PushExhaustedError(BranchfleetError):
    """Every push attempt for one branch failed."""

    def __init__(self, branch: str, remote: str, attempts: int) -> None:
        super().__init__(f"All {attempts} push attempts failed for '{branch}' -> '{remote}'")
        self.branch = branch
        self.remote = remote
        self.attempts = attempts


class TransientPushFailure(BranchfleetError):
    """A single push attempt failed; retried silently within the attempt budget."""

    def __init__(self, branch: str, attempt: int, result: PushResult) -> None:
        super().__init__(f"Push attempt {attempt} for '{branch}' failed: {result.value}")
        self.branch = branch
        self.attempt = attempt
        self.result = result
