"""Run results: the in-flight accumulator, the frozen report, and the failure log."""

from dataclasses import dataclass, field
from pathlib import Path


class FailureLog:
    """Newline-delimited list of branch names that failed during the run.

    Truncated when the run starts and appended to as failures occur, so an
    interrupted run still leaves an accurate list behind.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def reset(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text("", encoding="utf-8")

    def append(self, branch: str) -> None:
        with self._path.open("a", encoding="utf-8") as f:
            f.write(f"{branch}\n")


@dataclass(frozen=True)
class RunReport:
    """Terminal record of a provisioning run."""

    created: tuple[str, ...]
    pushed: tuple[str, ...]
    already_complete: tuple[str, ...]
    skipped: tuple[str, ...]
    failed: tuple[str, ...]
    failure_log: Path | None

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def pushed_count(self) -> int:
        return len(self.pushed)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


@dataclass
class RunResult:
    """Mutable accumulator the provisioning engine updates after each branch."""

    created: list[str] = field(default_factory=list)
    pushed: list[str] = field(default_factory=list)
    already_complete: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def push_count(self) -> int:
        return len(self.pushed)

    def record_failure(self, branch: str) -> bool:
        """Record branch as failed. Returns False if it was already recorded."""
        if branch in self.failed:
            return False
        self.failed.append(branch)
        return True

    def finalize(self, failure_log: Path | None) -> RunReport:
        return RunReport(
            created=tuple(self.created),
            pushed=tuple(self.pushed),
            already_complete=tuple(self.already_complete),
            skipped=tuple(self.skipped),
            failed=tuple(self.failed),
            failure_log=failure_log,
        )
