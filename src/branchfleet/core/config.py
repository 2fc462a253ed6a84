"""Run configuration: built-in defaults, [tool.branchfleet] overrides, validation.

Precedence is CLI flag > pyproject.toml [tool.branchfleet] > built-in default.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from branchfleet.core.errors import ConfigurationError
from branchfleet.core.git.abc import CommitIdentity
from branchfleet.core.naming import BranchSpec, validate_branch_name
from branchfleet.core.push import RetryPolicy

DEFAULTS: dict[str, Any] = {
    "count": 200,
    "prefix": "dummy-",
    "start": 1,
    "base": "main",
    "remote": "origin",
    "push": False,
    "file": ".branch-info",
    "message": "chore: add branch metadata {{BRANCH}}",
    "author_name": "Test Bot",
    "author_email": "test@example.com",
    "retries": 3,
    "delay": 1.0,
    "batch": 20,
    "batch_sleep": 5.0,
    "strategy": "plumbing",
    "failed_log": "failed-branches.log",
}

_INT_KEYS = {"count", "start", "retries", "batch"}
_FLOAT_KEYS = {"delay", "batch_sleep"}
_BOOL_KEYS = {"push"}

STRATEGY_NAMES = ("plumbing", "worktree")


@dataclass(frozen=True)
class RunConfig:
    """Validated, immutable parameters for one provisioning run."""

    branches: BranchSpec
    base: str
    remote: str
    push: bool
    metadata_path: str
    message_template: str
    identity: CommitIdentity
    retry_policy: RetryPolicy
    batch_size: int
    batch_cooldown: float
    strategy: str
    failed_log: Path


def read_pyproject_defaults(repo_root: Path) -> dict[str, Any]:
    """Read the [tool.branchfleet] table from pyproject.toml.

    Args:
        repo_root: Path to the repository root directory

    Returns:
        The table's entries, or an empty dict if the file or table is absent

    Raises:
        ConfigurationError: If pyproject.toml is not valid TOML or has unknown keys
    """
    pyproject_path = repo_root / "pyproject.toml"

    if not pyproject_path.exists():
        return {}

    try:
        with pyproject_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Could not parse {pyproject_path}: {e}") from e

    tool_section = data.get("tool")
    if tool_section is None:
        return {}

    section = tool_section.get("branchfleet")
    if section is None:
        return {}

    normalized = {str(key).replace("-", "_"): value for key, value in section.items()}
    unknown = sorted(set(normalized) - set(DEFAULTS))
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in [tool.branchfleet] of {pyproject_path}: {', '.join(unknown)}"
        )
    return normalized


def validate_metadata_path(path: str) -> None:
    """Check that path names a file git tracks inside the working tree.

    The path must already be in normal form: git's index rejects `.` and empty
    components, and nothing under `.git` may be written.

    Raises:
        ConfigurationError: If the path is not a plain relative repository path
    """
    components = path.split("/")
    if (
        not path
        or PurePosixPath(path).is_absolute()
        or any(part in ("", ".", "..") for part in components)
    ):
        raise ConfigurationError(
            f"Metadata file must be a normalized relative path inside the repository, got '{path}'"
        )
    if any(part.lower() == ".git" for part in components):
        raise ConfigurationError(f"Metadata file must not be inside .git, got '{path}'")


def _coerce(key: str, value: Any) -> Any:
    # bool is a subclass of int; keep them apart
    if key in _BOOL_KEYS:
        if not isinstance(value, bool):
            raise ConfigurationError(f"'{key}' must be true or false, got {value!r}")
        return value
    if key in _INT_KEYS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"'{key}' must be an integer, got {value!r}")
        return value
    if key in _FLOAT_KEYS:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ConfigurationError(f"'{key}' must be a number, got {value!r}")
        return float(value)
    if not isinstance(value, str):
        raise ConfigurationError(f"'{key}' must be a string, got {value!r}")
    return value


def build_run_config(
    overrides: Mapping[str, Any],
    file_defaults: Mapping[str, Any],
    *,
    cwd: Path,
) -> RunConfig:
    """Merge the configuration layers and validate the result.

    Args:
        overrides: Values given on the command line (None means "not given")
        file_defaults: Values from [tool.branchfleet]
        cwd: Directory a relative failed_log path is resolved against

    Raises:
        ConfigurationError: If any merged value is invalid
    """
    merged: dict[str, Any] = {}
    for key, default in DEFAULTS.items():
        value = overrides.get(key)
        if value is None:
            value = file_defaults.get(key, default)
        merged[key] = _coerce(key, value)

    branches = BranchSpec(prefix=merged["prefix"], start=merged["start"], count=merged["count"])
    branches.validate()

    if not merged["base"]:
        raise ConfigurationError("Base branch must not be empty")
    validate_branch_name(merged["base"])
    if not merged["remote"]:
        raise ConfigurationError("Remote name must not be empty")

    metadata_path = merged["file"]
    validate_metadata_path(metadata_path)

    if not merged["author_name"].strip() or not merged["author_email"].strip():
        raise ConfigurationError("Commit author name and email must not be empty")
    if merged["retries"] < 1:
        raise ConfigurationError(f"Push retries must be >= 1, got {merged['retries']}")
    if merged["delay"] < 0:
        raise ConfigurationError(f"Delay must be >= 0, got {merged['delay']}")
    if merged["batch"] < 1:
        raise ConfigurationError(f"Batch size must be >= 1, got {merged['batch']}")
    if merged["batch_sleep"] < 0:
        raise ConfigurationError(f"Batch sleep must be >= 0, got {merged['batch_sleep']}")
    if merged["strategy"] not in STRATEGY_NAMES:
        raise ConfigurationError(
            f"Unknown strategy '{merged['strategy']}' (expected one of {', '.join(STRATEGY_NAMES)})"
        )

    failed_log = Path(merged["failed_log"])
    if not failed_log.is_absolute():
        failed_log = cwd / failed_log

    identity = CommitIdentity(name=merged["author_name"], email=merged["author_email"])
    return RunConfig(
        branches=branches,
        base=merged["base"],
        remote=merged["remote"],
        push=merged["push"],
        metadata_path=metadata_path,
        message_template=merged["message"],
        identity=identity,
        retry_policy=RetryPolicy(max_attempts=merged["retries"], delay=merged["delay"]),
        batch_size=merged["batch"],
        batch_cooldown=merged["batch_sleep"],
        strategy=merged["strategy"],
        failed_log=failed_log,
    )
