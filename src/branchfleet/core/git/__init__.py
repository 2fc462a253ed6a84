"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes.
"""

from branchfleet.core.git.abc import CommitIdentity, Git, PushResult
from branchfleet.core.git.real import RealGit

__all__ = [
    "CommitIdentity",
    "Git",
    "PushResult",
    "RealGit",
]
