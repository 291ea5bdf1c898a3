"""Helpers shared by the worktree commands."""
from __future__ import annotations

from taskmaster.core.worktree import WorktreeManager


def build_manager() -> WorktreeManager:
    """Manager used by every worktree command (patched in tests)."""
    return WorktreeManager()
