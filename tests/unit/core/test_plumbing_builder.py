"""Tests for the scratch-index commit builder."""

from pathlib import Path

from branchfleet.core.builders import CommitCreated, CommitFailed, scratch_index
from branchfleet.core.git.fake import FakeGit
from branchfleet.core.metadata import BranchMetadataPayload
from branchfleet.core.revisions import BaseReference
from branchfleet.core.time.fake import DEFAULT_START
from tests.test_utils.builders import (
    BASE_COMMIT,
    make_base_git,
    make_config,
    make_plumbing_builder,
)


def _payload(branch: str) -> BranchMetadataPayload:
    return BranchMetadataPayload.generate(branch, "main", DEFAULT_START)


def test_scratch_index_is_private_and_removed() -> None:
    with scratch_index() as first, scratch_index() as second:
        assert first.path != second.path
        assert first.path.parent.exists()
        assert not first.path.exists()

    assert not first.path.parent.exists()
    assert not second.path.parent.exists()


def test_build_commit_does_not_touch_refs(tmp_path: Path) -> None:
    git = make_base_git()
    builder = make_plumbing_builder(git, make_config(tmp_path))

    commit = builder.build_commit(BaseReference("main", BASE_COMMIT), _payload("dummy-1"))

    assert git.branches == {"main": BASE_COMMIT}
    assert git.commits[commit].parent == BASE_COMMIT


def test_tree_is_base_tree_plus_metadata(tmp_path: Path) -> None:
    git = make_base_git()
    builder = make_plumbing_builder(git, make_config(tmp_path))
    payload = _payload("dummy-1")

    result = builder.provision("dummy-1", payload)

    assert isinstance(result, CommitCreated)
    assert git.branches["dummy-1"] == result.commit
    assert git.read_file(result.commit, "README.md") == "hello\n"
    assert git.read_file(result.commit, ".branch-info") == payload.render()


def test_existing_metadata_file_is_overwritten(tmp_path: Path) -> None:
    git_with_file = FakeGit(
        repository_root=tmp_path,
        branches={"main": BASE_COMMIT},
        commits={BASE_COMMIT: {"README.md": "hello\n", "meta/info": "old\n"}},
    )
    builder = make_plumbing_builder(git_with_file, make_config(tmp_path, file="meta/info"))
    payload = _payload("dummy-1")

    result = builder.provision("dummy-1", payload)

    assert isinstance(result, CommitCreated)
    assert git_with_file.read_file(result.commit, "meta/info") == payload.render()


def test_each_build_uses_its_own_index(tmp_path: Path) -> None:
    git = make_base_git()
    builder = make_plumbing_builder(git, make_config(tmp_path))

    builder.provision("dummy-1", _payload("dummy-1"))
    builder.provision("dummy-2", _payload("dummy-2"))

    first, second = git.index_paths
    assert first != second
    assert not first.parent.exists()
    assert not second.parent.exists()


def test_custom_message_template(tmp_path: Path) -> None:
    git = make_base_git()
    builder = make_plumbing_builder(git, make_config(tmp_path, message="seed {{BRANCH}}"))

    result = builder.provision("dummy-4", _payload("dummy-4"))

    assert isinstance(result, CommitCreated)
    assert git.commits[result.commit].message == "seed dummy-4"
    assert git.commits[result.commit].author is not None
    assert git.commits[result.commit].author.name == "Test Bot"


def test_write_tree_failure_reports_and_leaves_branch_missing(tmp_path: Path) -> None:
    git = FakeGit(
        branches={"main": BASE_COMMIT},
        commits={BASE_COMMIT: {}},
        write_tree_raises=RuntimeError("Failed to write tree from scratch index"),
    )
    builder = make_plumbing_builder(git, make_config(tmp_path))

    result = builder.provision("dummy-1", _payload("dummy-1"))

    assert isinstance(result, CommitFailed)
    assert "write tree" in result.reason
    assert "dummy-1" not in git.branches


def test_existing_ref_is_not_overwritten(tmp_path: Path) -> None:
    existing = "e1" * 20
    git = make_base_git(branches={"dummy-1": existing})
    builder = make_plumbing_builder(git, make_config(tmp_path))

    result = builder.provision("dummy-1", _payload("dummy-1"))

    assert isinstance(result, CommitFailed)
    assert "already exists" in result.reason
    assert git.branches["dummy-1"] == existing
