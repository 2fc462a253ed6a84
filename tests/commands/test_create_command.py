"""Tests for the create command."""

from pathlib import Path

from click.testing import CliRunner

from branchfleet.cli.cli import cli
from branchfleet.core.context import BranchfleetContext
from branchfleet.core.git.abc import PushResult
from branchfleet.core.git.fake import FakeGit
from branchfleet.core.time.fake import FakeTime

BASE_COMMIT = "c0" * 20


def _repo_git(repo_root: Path, **kwargs) -> FakeGit:
    branches = {"main": BASE_COMMIT}
    branches.update(kwargs.pop("branches", {}))
    return FakeGit(repository_root=repo_root, branches=branches, current_branch="main", **kwargs)


def test_dry_run_lists_branches_without_touching_repo(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "--dry-run", "-n", "3", "--push"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Target branches: dummy-1 .. dummy-3" in result.output
    assert "(dry-run) Would create branches and commits" in result.output
    for name in ("dummy-1", "dummy-2", "dummy-3"):
        assert (
            f'  - {name}  -> commit msg: "chore: add branch metadata {name}"'
            "  -> file: .branch-info"
        ) in result.output
    assert "dummy-4" not in result.output
    assert git.mutations == []
    assert git.push_calls == []
    assert not (tmp_path / "failed-branches.log").exists()


def test_dry_run_works_outside_repository(tmp_path: Path) -> None:
    ctx = BranchfleetContext.for_test(git=FakeGit(), cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "--dry-run", "-n", "1", "-p", "x-"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "x-1" in result.output


def test_create_without_push(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "2"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert set(git.branches) == {"main", "dummy-1", "dummy-2"}
    assert git.push_calls == []
    assert git.current_branch == "main"
    assert "==== Processing: dummy-1 ====" in result.output
    assert "Using base branch 'main'" in result.output
    assert "Provisioning Complete" in result.output
    assert "Created: 2" in result.output
    assert (tmp_path / "failed-branches.log").read_text(encoding="utf-8") == ""


def test_create_with_push_publishes_branches(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    time = FakeTime()
    ctx = BranchfleetContext.for_test(git=git, time=time, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(
        cli, ["create", "-n", "2", "--push", "--delay", "0.5", "-r", "upstream"], obj=ctx
    )

    assert result.exit_code == 0, result.output
    assert git.remote_branches["upstream"] == {
        "dummy-1": git.branches["dummy-1"],
        "dummy-2": git.branches["dummy-2"],
    }
    assert time.sleep_calls == [0.5, 0.5]
    assert "Pushed: 2" in result.output


def test_push_failures_are_reported_but_run_completes(tmp_path: Path) -> None:
    git = _repo_git(tmp_path, push_results={"dummy-1": [PushResult.REJECTED] * 2})
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "2", "--push", "--retries", "2"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "FAILED: dummy-1" in result.output
    assert "Provisioning Finished With Failures" in result.output
    assert "Re-run to retry." in result.output
    assert (tmp_path / "failed-branches.log").read_text(encoding="utf-8") == "dummy-1\n"
    assert "dummy-2" in git.remote_branches["origin"]


def test_custom_failed_log_location(tmp_path: Path) -> None:
    git = _repo_git(tmp_path, push_results={"dummy-1": [PushResult.NETWORK_ERROR]})
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["create", "-n", "1", "--push", "--retries", "1", "--failed-log", "out/failed.txt"],
        obj=ctx,
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "failed.txt").read_text(encoding="utf-8") == "dummy-1\n"


def test_outside_repository_fails(tmp_path: Path) -> None:
    ctx = BranchfleetContext.for_test(git=FakeGit(), cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "1"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: not inside a git repository." in result.output


def test_invalid_count_fails_before_any_work(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "-1"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: Branch count must be >= 0" in result.output
    assert git.mutations == []


def test_invalid_prefix_fails(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-p", "has space-"], obj=ctx)

    assert result.exit_code == 1
    assert "Invalid branch name" in result.output


def test_missing_base_is_fatal(tmp_path: Path) -> None:
    git = FakeGit(repository_root=tmp_path, branches={})
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "1", "-b", "develop"], obj=ctx)

    assert result.exit_code == 1
    assert "Attempting to fetch from origin" in result.output
    assert "Base branch 'develop' not found locally" in result.output
    assert git.branches == {}


def test_base_is_fetched_when_missing_locally(tmp_path: Path) -> None:
    git = FakeGit(
        repository_root=tmp_path,
        remote_branches={"origin": {"develop": BASE_COMMIT}},
    )
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "1", "-b", "develop"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.fetch_calls == [("origin", "develop")]
    assert git.commits[git.branches["dummy-1"]].parent == BASE_COMMIT


def test_worktree_strategy_requires_clean_tree(tmp_path: Path) -> None:
    git = _repo_git(tmp_path, dirty=True)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "1", "--strategy", "worktree"], obj=ctx)

    assert result.exit_code == 1
    assert "clean working tree" in result.output
    assert git.mutations == []


def test_worktree_strategy_creates_branches(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "2", "--strategy", "worktree"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.current_branch == "main"
    for name in ("dummy-1", "dummy-2"):
        content = git.read_file(git.branches[name], ".branch-info")
        assert content is not None
        assert f"branch: {name}" in content


def test_unknown_strategy_is_rejected_by_click(tmp_path: Path) -> None:
    ctx = BranchfleetContext.for_test(git=_repo_git(tmp_path), cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "--strategy", "magic"], obj=ctx)

    assert result.exit_code == 2
    assert "Invalid value for '--strategy'" in result.output


def test_pyproject_defaults_apply(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.branchfleet]\ncount = 2\nprefix = "cfg-"\nmessage = "seed {{BRANCH}}"\n',
        encoding="utf-8",
    )
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert set(git.branches) == {"main", "cfg-1", "cfg-2"}
    assert git.commits[git.branches["cfg-1"]].message == "seed cfg-1"


def test_cli_flag_beats_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.branchfleet]\ncount = 5\nprefix = "cfg-"\n', encoding="utf-8"
    )
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "-n", "1", "--dry-run"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Target branches: cfg-1 .. cfg-1" in result.output


def test_bad_pyproject_key_is_fatal(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.branchfleet]\nbogus = 1\n", encoding="utf-8")
    ctx = BranchfleetContext.for_test(git=_repo_git(tmp_path), cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "--dry-run"], obj=ctx)

    assert result.exit_code == 1
    assert "Unknown keys" in result.output


def test_rerun_is_idempotent(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)
    runner = CliRunner()

    first = runner.invoke(cli, ["create", "-n", "2", "--push"], obj=ctx)
    branches = git.branches
    second = runner.invoke(cli, ["create", "-n", "2", "--push"], obj=ctx)

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert git.branches == branches
    assert "Already complete: 2" in second.output
    assert "Created: 0" in second.output


def test_metadata_path_inside_git_dir_is_fatal(tmp_path: Path) -> None:
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=tmp_path)

    runner = CliRunner()
    result = runner.invoke(
        cli, ["create", "-n", "1", "--strategy", "worktree", "-f", ".git/description"], obj=ctx
    )

    assert result.exit_code == 1
    assert "Error: Metadata file must not be inside .git" in result.output
    assert git.mutations == []
    assert not (tmp_path / ".git").exists()


def test_dry_run_reads_defaults_from_repository_root(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.branchfleet]\ncount = 1\nprefix = "root-"\n', encoding="utf-8"
    )
    subdir = tmp_path / "pkg"
    subdir.mkdir()
    git = _repo_git(tmp_path)
    ctx = BranchfleetContext.for_test(git=git, cwd=subdir)

    runner = CliRunner()
    result = runner.invoke(cli, ["create", "--dry-run"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Target branches: root-1 .. root-1" in result.output
    assert git.mutations == []
    assert git.fetch_calls == []
    assert git.push_calls == []
