"""Worktree commands: create, remove, list, sync, info."""
