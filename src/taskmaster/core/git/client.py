"""Value types and the ``VcsClient`` protocol."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class LiveWorktree:
    """One entry of ``git worktree list --porcelain``."""

    path: str
    head: Optional[str] = None
    branch: Optional[str] = None
    bare: bool = False
    detached: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "head": self.head,
            "branch": self.branch,
            "bare": self.bare,
            "detached": self.detached,
        }


@dataclass(frozen=True)
class WorktreeInfo:
    """Where a linked worktree lives and which repository it belongs to."""

    branch: Optional[str]
    main_repo_path: Path
    current_path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "branch": self.branch,
            "mainRepoPath": str(self.main_repo_path),
            "currentPath": str(self.current_path),
        }


@dataclass(frozen=True)
class WorktreeAddResult:
    branch_reused: bool
    output: str = ""


@runtime_checkable
class VcsClient(Protocol):
    """Operations the worktree manager needs from version control."""

    def validate_version(self, minimum: str = ..., cwd: Optional[Path] = None) -> str: ...

    def create_worktree(
        self, root: Path, branch: str, path: Path, base_branch: str
    ) -> WorktreeAddResult: ...

    def remove_worktree(self, root: Path, path: Path, force: bool = False) -> None: ...

    def list_worktrees(self, root: Path) -> List[LiveWorktree]: ...

    def is_worktree(self, path: Path) -> bool: ...

    def get_worktree_info(self, path: Path) -> Optional[WorktreeInfo]: ...

    def branch_exists(self, root: Path, branch: str) -> bool: ...

    def has_uncommitted_changes(self, path: Path) -> bool: ...

    def is_unmerged(self, root: Path, branch: str, main_branch: str) -> bool: ...

    def delete_branch(self, root: Path, branch: str) -> None: ...

    def current_branch(self, path: Path) -> Optional[str]: ...


__all__ = ["LiveWorktree", "VcsClient", "WorktreeAddResult", "WorktreeInfo"]
