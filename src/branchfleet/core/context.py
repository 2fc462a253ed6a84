"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from branchfleet.core.git.abc import Git
from branchfleet.core.git.real import RealGit
from branchfleet.core.time.abc import Time
from branchfleet.core.time.real import RealTime


@dataclass(frozen=True)
class BranchfleetContext:
    """Immutable context holding all dependencies for branchfleet operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    time: Time
    cwd: Path  # Current working directory at CLI invocation

    @staticmethod
    def for_test(
        git: Git | None = None,
        time: Time | None = None,
        cwd: Path | None = None,
    ) -> "BranchfleetContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            git: Optional Git implementation. If None, creates empty FakeGit.
            time: Optional Time implementation. If None, creates FakeTime.
            cwd: Optional current working directory. If None, uses Path("/test/default/cwd").

        Returns:
            Frozen BranchfleetContext for use in tests
        """
        from branchfleet.core.git.fake import FakeGit
        from branchfleet.core.time.fake import FakeTime

        return BranchfleetContext(
            git=git if git is not None else FakeGit(),
            time=time if time is not None else FakeTime(),
            cwd=cwd if cwd is not None else Path("/test/default/cwd"),
        )


def create_context() -> BranchfleetContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.
    """
    return BranchfleetContext(git=RealGit(), time=RealTime(), cwd=Path.cwd())
