"""Resolution of the base revision every generated branch forks from."""

import logging
from dataclasses import dataclass
from pathlib import Path

from branchfleet.cli.output import user_output
from branchfleet.core.errors import BaseResolutionError
from branchfleet.core.git.abc import Git

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaseReference:
    """A base branch name pinned to the commit it resolved to at run start."""

    name: str
    commit: str


def resolve_base(git: Git, repo_root: Path, base: str, remote: str) -> BaseReference:
    """Resolve base to a commit, fetching it from remote if it is not present locally.

    Raises:
        BaseResolutionError: If base is still unresolvable after the fetch
    """
    commit = git.resolve_revision(repo_root, base)
    if commit is not None:
        logger.debug("Base '%s' resolved locally to %s", base, commit)
        return BaseReference(name=base, commit=commit)

    user_output(f"Base branch '{base}' not found locally. Attempting to fetch from {remote}...")
    try:
        git.fetch_ref(repo_root, remote, base)
    except RuntimeError as e:
        raise BaseResolutionError(base, remote, str(e)) from e

    commit = git.resolve_revision(repo_root, base)
    if commit is None:
        raise BaseResolutionError(base, remote, "Fetched, but the ref does not name a commit")
    logger.debug("Base '%s' resolved after fetch to %s", base, commit)
    return BaseReference(name=base, commit=commit)
