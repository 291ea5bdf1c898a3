"""End-to-end worktree lifecycle against a real git repository."""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

import pytest

from taskmaster.core.exceptions import (
    FeatureDisabledError,
    SelfRemovalError,
    UnmergedBranchError,
)
from taskmaster.core.git import GitGateway
from taskmaster.core.worktree import WORKTREE_REMOVED, EventBus, WorktreeManager, WorktreeRegistry
from helpers.git_helpers import branch_exists, git_commit, live_worktree_paths
from helpers.io_utils import set_worktrees_enabled


@pytest.fixture
def removed_events() -> List[dict]:
    return []


@pytest.fixture
def manager(removed_events: List[dict]) -> WorktreeManager:
    bus = EventBus()
    bus.subscribe(WORKTREE_REMOVED, lambda e: removed_events.append(e.to_dict()))
    return WorktreeManager(events=bus)


@pytest.mark.requires_git
class TestWorktreeLifecycle:
    def test_create_worktree_for_task(self, git_repo: Path, manager: WorktreeManager) -> None:
        result = manager.create(git_repo, "101")

        path = git_repo / "worktrees" / "task-101"
        assert Path(result.path) == path
        assert path.is_dir()
        assert branch_exists(git_repo, "task-101")
        assert GitGateway().is_worktree(path)
        entry = WorktreeRegistry(git_repo).find_by_task_id("101")
        assert entry is not None
        assert entry.worktree_id == "task-101"
        assert entry.branch == "task-101"

    def test_remove_one_of_two(
        self, git_repo: Path, manager: WorktreeManager, removed_events: List[dict]
    ) -> None:
        manager.create(git_repo, "101")
        manager.create(git_repo, "102")

        result = manager.remove(git_repo, "task-101")

        assert result.removed is True
        assert branch_exists(git_repo, "task-101")
        managed = [w.worktree_id for w in manager.list_worktrees(git_repo) if w.is_managed]
        assert managed == ["task-102"]
        assert len(removed_events) == 1
        assert removed_events[0]["worktreeId"] == "task-101"
        assert removed_events[0]["taskId"] == "101"
        assert removed_events[0]["branchRemoved"] is False

    def test_disabled_feature_leaves_state_alone(self, git_repo: Path, manager: WorktreeManager) -> None:
        manager.create(git_repo, "101")
        set_worktrees_enabled(git_repo, False)
        before = live_worktree_paths(git_repo)

        with pytest.raises(FeatureDisabledError):
            manager.create(git_repo, "102")
        with pytest.raises(FeatureDisabledError):
            manager.remove(git_repo, "task-101")
        with pytest.raises(FeatureDisabledError):
            manager.list_worktrees(git_repo)

        assert live_worktree_paths(git_repo) == before
        assert not (git_repo / "worktrees" / "task-102").exists()

    def test_unmerged_branch_blocks_branch_removal(self, git_repo: Path, manager: WorktreeManager) -> None:
        manager.create(git_repo, "5")
        path = git_repo / "worktrees" / "task-5"
        (path / "feature.txt").write_text("work in progress\n", encoding="utf-8")
        git_commit(path, "feature work")

        with pytest.raises(UnmergedBranchError):
            manager.remove_and_branch(git_repo, "task-5")

        assert path.is_dir()
        assert branch_exists(git_repo, "task-5")

    def test_merged_branch_is_removed_with_worktree(
        self, git_repo: Path, manager: WorktreeManager, removed_events: List[dict]
    ) -> None:
        manager.create(git_repo, "6")

        result = manager.remove_and_branch(git_repo, "task-6")

        assert result.branch_removed is True
        assert not (git_repo / "worktrees" / "task-6").exists()
        assert not branch_exists(git_repo, "task-6")
        assert removed_events[0]["branchRemoved"] is True

    def test_cannot_remove_worktree_from_inside(
        self, git_repo: Path, manager: WorktreeManager, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        manager.create(git_repo, "7")
        path = git_repo / "worktrees" / "task-7"
        monkeypatch.chdir(path)

        with pytest.raises(SelfRemovalError):
            manager.remove(git_repo, "task-7")

        assert path.is_dir()

    def test_sync_after_out_of_band_delete(self, git_repo: Path, manager: WorktreeManager) -> None:
        manager.create(git_repo, "8")
        manager.create(git_repo, "9")
        shutil.rmtree(git_repo / "worktrees" / "task-8")

        report = manager.sync(git_repo)

        assert report.removed_entries == ["task-8"]
        registry = WorktreeRegistry(git_repo)
        assert registry.get("task-8") is None
        assert registry.get("task-9") is not None
        assert manager.sync(git_repo).removed_entries == []
