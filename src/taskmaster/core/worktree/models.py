"""Records and results for worktree orchestration.

Serialized forms use camelCase keys, matching the registry file and the CLI's
JSON output.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from taskmaster.core.git.client import LiveWorktree


@dataclass(frozen=True)
class WorktreeEntry:
    """One registry record. Never mutated; re-creating a worktree replaces it."""

    worktree_id: str
    task_id: str
    branch: str
    path: str
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "worktreeId": self.worktree_id,
            "taskId": self.task_id,
            "branch": self.branch,
            "path": self.path,
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], worktree_id: Optional[str] = None) -> "WorktreeEntry":
        """Build from a registry mapping; ``worktree_id`` fills in a missing ``worktreeId``."""
        return cls(
            worktree_id=str(data.get("worktreeId") or worktree_id or ""),
            task_id=str(data.get("taskId", "")),
            branch=str(data.get("branch", "")),
            path=str(data.get("path", "")),
            created_at=data.get("createdAt"),
        )


@dataclass
class CreateResult:
    worktree_id: str
    task_id: str
    branch: str
    path: str
    base_branch: str
    branch_reused: bool = False
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worktreeId": self.worktree_id,
            "taskId": self.task_id,
            "branch": self.branch,
            "path": self.path,
            "baseBranch": self.base_branch,
            "branchReused": self.branch_reused,
            "warnings": list(self.warnings),
        }


@dataclass
class RemoveResult:
    """Outcome of a removal.

    ``cancelled`` is True when the caller declined a forced removal; nothing
    was changed in that case.
    """

    worktree_id: str
    path: str
    branch: Optional[str] = None
    removed: bool = False
    branch_removed: bool = False
    forced: bool = False
    cancelled: bool = False
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worktreeId": self.worktree_id,
            "path": self.path,
            "branch": self.branch,
            "removed": self.removed,
            "branchRemoved": self.branch_removed,
            "forced": self.forced,
            "cancelled": self.cancelled,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ManagedWorktree:
    """A live git worktree tagged with the naming convention's verdict."""

    path: str
    head: Optional[str]
    branch: Optional[str]
    bare: bool
    detached: bool
    is_managed: bool
    task_id: Optional[str] = None
    worktree_id: Optional[str] = None

    @classmethod
    def from_live(
        cls, live: LiveWorktree, task_id: Optional[str], worktree_id: Optional[str]
    ) -> "ManagedWorktree":
        return cls(
            path=live.path,
            head=live.head,
            branch=live.branch,
            bare=live.bare,
            detached=live.detached,
            is_managed=task_id is not None,
            task_id=task_id,
            worktree_id=worktree_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "head": self.head,
            "branch": self.branch,
            "bare": self.bare,
            "detached": self.detached,
            "isManaged": self.is_managed,
            "taskId": self.task_id,
            "worktreeId": self.worktree_id,
        }


@dataclass
class SyncReport:
    removed_entries: List[str] = field(default_factory=list)
    vcs_worktrees: int = 0
    registry_entries: int = 0
    issues: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.removed_entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "removedEntries": list(self.removed_entries),
            "vcsWorktrees": self.vcs_worktrees,
            "registryEntries": self.registry_entries,
            "issues": list(self.issues),
        }


__all__ = ["CreateResult", "ManagedWorktree", "RemoveResult", "SyncReport", "WorktreeEntry"]
