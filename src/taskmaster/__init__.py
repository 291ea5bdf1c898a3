"""
taskmaster - task management with isolated per-task git worktrees

Each task can get its own git worktree and branch, tracked in a small
on-disk registry that is reconciled against git's live state.
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
