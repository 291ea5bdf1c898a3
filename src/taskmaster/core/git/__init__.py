"""Git access for worktree orchestration.

``GitGateway`` is the only code that shells out to ``git``. Orchestration code
depends on the ``VcsClient`` protocol so it can be driven by a test double.
"""
from __future__ import annotations

from .client import LiveWorktree, VcsClient, WorktreeAddResult, WorktreeInfo
from .gateway import GitGateway
from .parsing import clean_git_error, parse_git_version, parse_worktree_list

__all__ = [
    "GitGateway",
    "LiveWorktree",
    "VcsClient",
    "WorktreeAddResult",
    "WorktreeInfo",
    "clean_git_error",
    "parse_git_version",
    "parse_worktree_list",
]
