"""Per-branch metadata written as the sole change of each generated commit."""

import secrets
from dataclasses import dataclass
from datetime import datetime

BRANCH_PLACEHOLDER = "{{BRANCH}}"
TOKEN_BYTES = 12


@dataclass(frozen=True)
class BranchMetadataPayload:
    """Metadata file content for one generated branch.

    The random token guarantees every branch gets a distinct blob, tree and
    commit; without it, branches created in the same second would share one
    content-addressed commit.
    """

    branch: str
    base: str
    created_at: datetime
    token: str

    @staticmethod
    def generate(branch: str, base: str, now: datetime) -> "BranchMetadataPayload":
        """Create a fresh payload with a new random token.

        Args:
            branch: Branch the payload is written to
            base: Name of the base branch
            now: Creation time (UTC)
        """
        return BranchMetadataPayload(
            branch=branch,
            base=base,
            created_at=now,
            token=secrets.token_hex(TOKEN_BYTES),
        )

    def render(self) -> str:
        """Render as `key: value` lines."""
        created = self.created_at.strftime("%Y-%m-%dT%H:%M:%SZ")
        return (
            f"branch: {self.branch}\n"
            f"base: {self.base}\n"
            f"created_at: {created}\n"
            f"token: {self.token}\n"
        )


def render_commit_message(template: str, branch: str) -> str:
    """Substitute the branch name for every {{BRANCH}} placeholder."""
    return template.replace(BRANCH_PLACEHOLDER, branch)
