"""WorktreeManager orchestration against the in-memory FakeVcs."""
from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import List

import pytest

from taskmaster.core.exceptions import (
    DirtyWorktreeError,
    FeatureDisabledError,
    ForceNotSupportedError,
    RegistryError,
    SelfRemovalError,
    UnmergedBranchError,
    VcsError,
    WorktreeNotFoundError,
    WorktreeValidationError,
)
from taskmaster.core.worktree.events import WORKTREE_CREATED, WORKTREE_REMOVED, EventBus
from taskmaster.core.worktree.manager import WorktreeManager
from taskmaster.core.worktree.registry import WorktreeRegistry
from helpers.fake_vcs import FakeVcs
from helpers.io_utils import write_project_config


class Harness:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.vcs = FakeVcs(root)
        self.bus = EventBus()
        self.enabled = True
        self.cwd = root
        self.events: List[tuple] = []
        self.bus.subscribe(WORKTREE_CREATED, lambda e: self.events.append((WORKTREE_CREATED, e.to_dict())))
        self.bus.subscribe(WORKTREE_REMOVED, lambda e: self.events.append((WORKTREE_REMOVED, e.to_dict())))
        self.manager = WorktreeManager(
            self.vcs,
            events=self.bus,
            feature_gate=lambda _root: self.enabled,
            cwd=lambda: self.cwd,
        )
        self.registry = WorktreeRegistry(root)

    def path(self, worktree_id: str) -> Path:
        return self.root / "worktrees" / worktree_id


@pytest.fixture
def h(isolated_project_env: Path) -> Harness:
    return Harness(isolated_project_env)


class TestCreate:
    def test_create_new_branch(self, h: Harness) -> None:
        result = h.manager.create(h.root, "101")

        assert result.worktree_id == "task-101"
        assert result.branch == "task-101"
        assert result.path == str(h.path("task-101"))
        assert result.base_branch == "main"
        assert result.branch_reused is False
        assert result.warnings == []
        assert h.vcs.is_worktree(h.path("task-101"))
        entry = h.registry.find_by_task_id("101")
        assert entry is not None and entry.worktree_id == "task-101"
        assert h.events == [
            (
                WORKTREE_CREATED,
                {
                    "taskId": "101",
                    "path": str(h.path("task-101")),
                    "branch": "task-101",
                    "baseBranch": "main",
                    "worktreeId": "task-101",
                },
            )
        ]

    def test_create_reuses_existing_branch(self, h: Harness) -> None:
        h.vcs.branches.add("task-7")
        assert h.manager.create(h.root, "7").branch_reused is True

    def test_create_with_explicit_base(self, h: Harness) -> None:
        h.vcs.branches.add("develop")
        result = h.manager.create(h.root, "8", base_branch="develop")
        assert result.base_branch == "develop"
        assert h.events[0][1]["baseBranch"] == "develop"

    def test_create_uses_configured_layout(self, h: Harness) -> None:
        write_project_config(
            h.root, "worktrees", {"worktrees": {"directory": "trees", "prefix": "wt", "defaultBaseBranch": "main"}}
        )
        result = h.manager.create(h.root, "3")

        assert result.worktree_id == "wt-3"
        assert Path(result.path) == h.root / "trees" / "wt-3"

    def test_git_version_checked_once(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.manager.create(h.root, "2")
        assert h.vcs.version_checks == 1
        assert h.vcs.version_cwd == h.root

    def test_invalid_task_id(self, h: Harness) -> None:
        with pytest.raises(WorktreeValidationError):
            h.manager.create(h.root, "../../evil")
        assert h.vcs.calls == []

    def test_git_failure_propagates_and_skips_registry(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        with pytest.raises(VcsError, match="Error creating worktree"):
            h.manager.create(h.root, "1")
        assert len(h.registry.entries()) == 1
        assert len(h.events) == 1

    def test_registry_failure_is_a_warning(self, h: Harness, monkeypatch) -> None:
        def broken_add(self, entry):
            raise RegistryError("disk full")

        monkeypatch.setattr(WorktreeRegistry, "add", broken_add)

        result = h.manager.create(h.root, "5")

        assert h.vcs.is_worktree(h.path("task-5"))
        assert result.warnings and "disk full" in result.warnings[0]
        assert h.events[0][0] == WORKTREE_CREATED

    def test_disabled_feature(self, h: Harness) -> None:
        h.enabled = False
        with pytest.raises(FeatureDisabledError, match="features.worktrees"):
            h.manager.create(h.root, "1")
        assert h.vcs.calls == []
        assert not (h.root / "worktrees").exists()


class TestRemove:
    def test_remove_clean(self, h: Harness) -> None:
        h.manager.create(h.root, "101")
        h.manager.create(h.root, "102")
        h.events.clear()

        result = h.manager.remove(h.root, "task-101")

        assert result.removed is True
        assert result.branch_removed is False
        assert not h.path("task-101").exists()
        assert "task-101" in h.vcs.branches
        assert h.registry.get("task-101") is None
        listed = [w for w in h.manager.list_worktrees(h.root) if w.is_managed]
        assert [w.worktree_id for w in listed] == ["task-102"]
        assert h.events == [
            (
                WORKTREE_REMOVED,
                {
                    "taskId": "101",
                    "worktreeId": "task-101",
                    "path": str(h.path("task-101")),
                    "branch": "task-101",
                    "branchRemoved": False,
                },
            )
        ]

    def test_removed_event_carries_dotted_task_id(self, h: Harness) -> None:
        h.manager.create(h.root, "3.1.4")
        h.events.clear()

        h.manager.remove(h.root, "task-3.1.4")

        assert h.events[0][1]["taskId"] == "3.1.4"
        assert h.events[0][1]["worktreeId"] == "task-3.1.4"

    def test_remove_missing(self, h: Harness) -> None:
        with pytest.raises(WorktreeNotFoundError, match="does not exist"):
            h.manager.remove(h.root, "task-404")

    def test_remove_missing_hints_when_inside_other_worktree(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.cwd = h.path("task-1")
        with pytest.raises(WorktreeNotFoundError, match="appear to be inside a worktree"):
            h.manager.remove(h.root, "task-2")

    def test_remove_rejects_malformed_id(self, h: Harness) -> None:
        with pytest.raises(WorktreeValidationError):
            h.manager.remove(h.root, "main")

    @pytest.mark.parametrize("subdir", ["", "src/deep"])
    def test_self_removal_guard(self, h: Harness, subdir: str) -> None:
        h.manager.create(h.root, "1")
        inside = h.path("task-1") / subdir
        inside.mkdir(parents=True, exist_ok=True)
        h.cwd = inside
        h.events.clear()

        with pytest.raises(SelfRemovalError, match="cd "):
            h.manager.remove(h.root, "task-1")

        assert h.path("task-1").exists()
        assert h.registry.get("task-1") is not None
        assert h.events == []

    def test_sibling_prefix_is_not_inside(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.manager.create(h.root, "12")
        h.cwd = h.path("task-12")

        assert h.manager.remove(h.root, "task-1").removed is True

    def test_dirty_without_force(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.vcs.mark_dirty(h.path("task-1"))

        with pytest.raises(DirtyWorktreeError, match="--force"):
            h.manager.remove(h.root, "task-1")
        assert h.path("task-1").exists()

    def test_dirty_with_force_and_confirmation(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.vcs.mark_dirty(h.path("task-1"))
        prompts: List[str] = []

        result = h.manager.remove(h.root, "task-1", force=True, confirm=lambda m: prompts.append(m) or True)

        assert result.removed and result.forced
        assert "PERMANENTLY LOST" in prompts[0]
        assert not h.path("task-1").exists()

    def test_dirty_with_force_declined(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.vcs.mark_dirty(h.path("task-1"))
        h.events.clear()

        result = h.manager.remove(h.root, "task-1", force=True, confirm=lambda m: False)

        assert result.cancelled is True
        assert result.removed is False
        assert h.path("task-1").exists()
        assert h.registry.get("task-1") is not None
        assert h.events == []

    def test_force_without_confirm_callback(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.vcs.mark_dirty(h.path("task-1"))
        assert h.manager.remove(h.root, "task-1", force=True).forced is True

    def test_force_on_clean_worktree_is_a_plain_removal(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        result = h.manager.remove(h.root, "task-1", force=True, confirm=lambda m: pytest.fail("asked"))
        assert result.removed and not result.forced

    def test_unregistered_worktree_still_removed(self, h: Harness) -> None:
        h.vcs.create_worktree(h.root, "task-3", h.path("task-3"), "main")
        result = h.manager.remove(h.root, "task-3")
        assert result.removed and result.warnings == []

    def test_registry_write_failure_is_a_warning(self, h: Harness, monkeypatch) -> None:
        h.manager.create(h.root, "1")

        def broken_remove(self, worktree_id):
            raise RegistryError("read-only filesystem")

        monkeypatch.setattr(WorktreeRegistry, "remove", broken_remove)
        result = h.manager.remove(h.root, "task-1")

        assert result.removed
        assert "read-only filesystem" in result.warnings[0]

    def test_remove_reconciles_first(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.manager.create(h.root, "2")
        del h.vcs.worktrees[str(h.path("task-1").resolve())]

        h.manager.remove(h.root, "task-2")

        assert h.registry.entries() == []

    def test_remove_branch_delegates(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        result = h.manager.remove(h.root, "task-1", remove_branch=True)
        assert result.branch_removed is True
        assert "task-1" not in h.vcs.branches


class TestRemoveAndBranch:
    def test_force_rejected_before_anything(self, h: Harness) -> None:
        h.enabled = False
        with pytest.raises(ForceNotSupportedError):
            h.manager.remove_and_branch(h.root, "task-1", force=True)

    def test_force_via_remove_is_rejected(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        with pytest.raises(ForceNotSupportedError):
            h.manager.remove(h.root, "task-1", force=True, remove_branch=True)
        assert h.path("task-1").exists()
        assert "task-1" in h.vcs.branches

    def test_removes_worktree_registry_and_branch(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.events.clear()

        result = h.manager.remove_and_branch(h.root, "task-1")

        assert result.removed and result.branch_removed
        assert not h.path("task-1").exists()
        assert h.registry.get("task-1") is None
        assert "task-1" not in h.vcs.branches
        assert h.events[0][1]["branchRemoved"] is True
        assert h.events[0][1]["taskId"] == "1"
        ops = [c[0] for c in h.vcs.calls]
        assert ops.index("remove_worktree") < ops.index("delete_branch")

    def test_dirty_is_refused_without_escape(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.vcs.mark_dirty(h.path("task-1"))

        with pytest.raises(DirtyWorktreeError):
            h.manager.remove_and_branch(h.root, "task-1")
        assert h.path("task-1").exists()

    def test_unmerged_is_refused(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.vcs.unmerged.add("task-1")

        with pytest.raises(UnmergedBranchError, match="unmerged"):
            h.manager.remove_and_branch(h.root, "task-1")
        assert h.path("task-1").exists()
        assert "task-1" in h.vcs.branches

    def test_self_removal_guard(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.cwd = h.path("task-1")
        with pytest.raises(SelfRemovalError):
            h.manager.remove_and_branch(h.root, "task-1")

    def test_missing_worktree(self, h: Harness) -> None:
        with pytest.raises(WorktreeNotFoundError):
            h.manager.remove_and_branch(h.root, "task-9")


class TestListAndSync:
    def test_list_tags_managed_worktrees(self, h: Harness) -> None:
        h.manager.create(h.root, "1.2")
        h.vcs.create_worktree(h.root, "scratch", h.root / "elsewhere" / "scratch", "main")

        listed = {Path(w.path).name: w for w in h.manager.list_worktrees(h.root)}

        assert listed["task-1.2"].is_managed is True
        assert listed["task-1.2"].task_id == "1.2"
        assert listed["task-1.2"].to_dict()["isManaged"] is True
        assert listed["scratch"].is_managed is False
        assert listed["scratch"].task_id is None
        assert listed[h.root.name].is_managed is False

    def test_list_propagates_git_failure(self, h: Harness) -> None:
        h.vcs.fail_list = True
        with pytest.raises(VcsError):
            h.manager.list_worktrees(h.root)

    def test_sync_removes_exactly_the_stale_entry(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.manager.create(h.root, "2")
        shutil.rmtree(h.path("task-1"))

        first = h.manager.sync(h.root)
        second = h.manager.sync(h.root)

        assert first.removed_entries == ["task-1"]
        assert second.removed_entries == []
        data = json.loads(h.registry.path.read_text(encoding="utf-8"))
        assert list(data["worktrees"]) == ["task-2"]

    def test_malformed_entry_does_not_break_create_or_sync(self, h: Harness) -> None:
        h.registry.path.parent.mkdir(parents=True)
        h.registry.path.write_text(
            json.dumps(
                {
                    "worktrees": {
                        "task-9": {
                            "worktreeId": "task-9",
                            "taskId": 9,
                            "branch": "task-9",
                            "path": str(h.path("task-9")),
                        }
                    },
                    "metadata": {"version": "1.0"},
                }
            ),
            encoding="utf-8",
        )

        created = h.manager.create(h.root, "2")
        report = h.manager.sync(h.root)

        assert created.warnings == []
        assert report.removed_entries == ["task-9"]
        assert report.issues == []
        assert [e.worktree_id for e in h.registry.entries()] == ["task-2"]
        assert h.manager.sync(h.root).changed is False

    def test_disabled_gate_blocks_everything(self, h: Harness) -> None:
        h.manager.create(h.root, "1")
        h.enabled = False

        with pytest.raises(FeatureDisabledError):
            h.manager.list_worktrees(h.root)
        with pytest.raises(FeatureDisabledError):
            h.manager.remove(h.root, "task-1")
        with pytest.raises(FeatureDisabledError):
            h.manager.sync(h.root)
        assert h.path("task-1").exists()
