"""Branch name sequences for a provisioning run."""

import re
from collections.abc import Iterator
from dataclasses import dataclass

from branchfleet.core.errors import ConfigurationError

# Subset of `git check-ref-format` rules that a generated name can violate
_FORBIDDEN_REF_CHARS = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def validate_branch_name(name: str) -> None:
    """Check a branch name against git's ref-name rules.

    Raises:
        ConfigurationError: If git would refuse the name
    """
    problems: list[str] = []
    if not name:
        problems.append("name is empty")
    if _FORBIDDEN_REF_CHARS.search(name):
        problems.append("contains whitespace, control or one of '~^:?*[\\'")
    if ".." in name or "@{" in name or "//" in name:
        problems.append("contains '..', '@{' or '//'")
    if name.startswith(("-", "/")) or name.endswith(("/", ".", ".lock")):
        problems.append("has an invalid leading or trailing character sequence")
    if any(part.startswith(".") for part in name.split("/")):
        problems.append("has a path component starting with '.'")
    if name == "@":
        problems.append("is '@'")
    if problems:
        raise ConfigurationError(f"Invalid branch name '{name}': {'; '.join(problems)}")


@dataclass(frozen=True)
class BranchSpec:
    """An ordered run of branch names: {prefix}{start} .. {prefix}{start+count-1}."""

    prefix: str
    start: int
    count: int

    @property
    def end(self) -> int:
        """Index of the last branch (start - 1 when count is 0)."""
        return self.start + self.count - 1

    def names(self) -> Iterator[str]:
        for index in range(self.start, self.start + self.count):
            yield f"{self.prefix}{index}"

    def describe(self) -> str:
        if self.count == 0:
            return "(no branches)"
        return f"{self.prefix}{self.start} .. {self.prefix}{self.end}"

    def validate(self) -> None:
        """Raises ConfigurationError if these settings cannot produce valid branch names."""
        if self.count < 0:
            raise ConfigurationError(f"Branch count must be >= 0, got {self.count}")
        if self.start < 0:
            raise ConfigurationError(f"Start index must be >= 0, got {self.start}")
        if self.count == 0:
            return
        # Only the prefix varies in shape; the first and last names cover it
        validate_branch_name(f"{self.prefix}{self.start}")
        validate_branch_name(f"{self.prefix}{self.end}")
