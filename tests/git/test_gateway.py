from __future__ import annotations

from pathlib import Path

import pytest

from taskmaster.core.exceptions import DirtyWorktreeError, VcsError
from taskmaster.core.git import GitGateway
from helpers.git_helpers import branch_exists, git, git_commit, live_worktree_paths


@pytest.mark.requires_git
class TestGitGateway:
    def test_validate_version_accepts_installed_git(self, git_repo: Path) -> None:
        version = GitGateway().validate_version()
        assert version.count(".") == 2

    def test_validate_version_rejects_future_minimum(self, git_repo: Path) -> None:
        with pytest.raises(VcsError, match="too old"):
            GitGateway().validate_version("999.0.0")

    def test_missing_git_binary(self, git_repo: Path) -> None:
        with pytest.raises(VcsError, match="not found"):
            GitGateway(git="git-binary-that-does-not-exist").validate_version()

    def test_create_new_branch_then_list(self, git_repo: Path) -> None:
        gw = GitGateway()
        path = git_repo / "worktrees" / "task-1"

        result = gw.create_worktree(git_repo, "task-1", path, "main")

        assert result.branch_reused is False
        assert branch_exists(git_repo, "task-1")
        assert path.resolve() in live_worktree_paths(git_repo)
        listed = {Path(w.path).resolve(): w for w in gw.list_worktrees(git_repo)}
        assert listed[path.resolve()].branch == "task-1"
        assert listed[git_repo.resolve()].branch == "main"

    def test_create_reuses_existing_branch(self, git_repo: Path) -> None:
        git(git_repo, "branch", "task-2")
        gw = GitGateway()

        result = gw.create_worktree(git_repo, "task-2", git_repo / "worktrees" / "task-2", "main")

        assert result.branch_reused is True

    def test_create_failure_reports_git_message(self, git_repo: Path) -> None:
        with pytest.raises(VcsError, match="^Error creating worktree: ") as excinfo:
            GitGateway().create_worktree(git_repo, "task-3", git_repo / "worktrees" / "task-3", "no-such-base")
        assert "Command failed" not in str(excinfo.value)

    def test_is_worktree_and_info(self, git_repo: Path) -> None:
        gw = GitGateway()
        path = git_repo / "worktrees" / "task-4"
        gw.create_worktree(git_repo, "task-4", path, "main")

        assert gw.is_worktree(path) is True
        assert gw.is_worktree(git_repo) is False
        info = gw.get_worktree_info(path)
        assert info is not None
        assert info.branch == "task-4"
        assert info.main_repo_path == git_repo.resolve()
        assert info.current_path == path.resolve()
        assert gw.get_worktree_info(git_repo) is None

    def test_remove_dirty_worktree_raises_dirty_error(self, git_repo: Path) -> None:
        gw = GitGateway()
        path = git_repo / "worktrees" / "task-5"
        gw.create_worktree(git_repo, "task-5", path, "main")
        (path / "scratch.txt").write_text("wip\n", encoding="utf-8")

        assert gw.has_uncommitted_changes(path) is True
        with pytest.raises(DirtyWorktreeError):
            gw.remove_worktree(git_repo, path)
        assert path.exists()

        gw.remove_worktree(git_repo, path, force=True)
        assert not path.exists()

    def test_is_unmerged_and_delete_branch(self, git_repo: Path) -> None:
        gw = GitGateway()
        path = git_repo / "worktrees" / "task-6"
        gw.create_worktree(git_repo, "task-6", path, "main")

        assert gw.is_unmerged(git_repo, "task-6", "main") is False
        (path / "feature.txt").write_text("feature\n", encoding="utf-8")
        git_commit(path, "feature work")
        assert gw.is_unmerged(git_repo, "task-6", "main") is True

        gw.remove_worktree(git_repo, path)
        gw.delete_branch(git_repo, "task-6")
        assert gw.branch_exists(git_repo, "task-6") is False

    def test_missing_branch_is_not_unmerged(self, git_repo: Path) -> None:
        assert GitGateway().is_unmerged(git_repo, "task-404", "main") is False

    def test_current_branch(self, git_repo: Path) -> None:
        assert GitGateway().current_branch(git_repo) == "main"

    def test_commands_in_missing_directory_raise_vcs_error(self, git_repo: Path) -> None:
        with pytest.raises(VcsError, match="does not exist"):
            GitGateway().has_uncommitted_changes(git_repo / "nowhere")


def _enter_deleted_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    gone = tmp_path / "gone"
    gone.mkdir()
    monkeypatch.chdir(gone)
    gone.rmdir()


def test_validate_version_with_deleted_cwd_raises_vcs_error(tmp_path: Path, monkeypatch) -> None:
    _enter_deleted_directory(tmp_path, monkeypatch)

    with pytest.raises(VcsError, match="current directory no longer exists"):
        GitGateway().validate_version()


@pytest.mark.requires_git
def test_validate_version_runs_in_given_directory(git_repo: Path, tmp_path: Path, monkeypatch) -> None:
    _enter_deleted_directory(tmp_path, monkeypatch)

    assert GitGateway().validate_version(cwd=git_repo).count(".") == 2
