"""Per-task git worktree orchestration.

Usage:
    from taskmaster.core.worktree import WorktreeManager, worktree_events

    unsubscribe = worktree_events.subscribe("worktree.created", print)
    manager = WorktreeManager()
    result = manager.create(Path("/path/to/project"), "7")
"""
from __future__ import annotations

from .events import (
    WORKTREE_CREATED,
    WORKTREE_REMOVED,
    EventBus,
    WorktreeCreatedEvent,
    WorktreeRemovedEvent,
    worktree_events,
)
from .manager import WorktreeManager
from .models import CreateResult, ManagedWorktree, RemoveResult, SyncReport, WorktreeEntry
from .naming import task_id_from_name, validate_task_id, validate_worktree_id, worktree_id_for
from .reconcile import RegistryReconciler
from .registry import WorktreeRegistry

__all__ = [
    "CreateResult",
    "EventBus",
    "ManagedWorktree",
    "RegistryReconciler",
    "RemoveResult",
    "SyncReport",
    "WORKTREE_CREATED",
    "WORKTREE_REMOVED",
    "WorktreeCreatedEvent",
    "WorktreeEntry",
    "WorktreeManager",
    "WorktreeRegistry",
    "WorktreeRemovedEvent",
    "task_id_from_name",
    "validate_task_id",
    "validate_worktree_id",
    "worktree_events",
    "worktree_id_for",
]
