"""Naming convention for managed worktrees.

A managed worktree's directory name and branch name are both
``<prefix>-<taskId>``; task ids are digits with optional dotted subtask parts
(``7``, ``1.2``, ``3.1.4``).
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Pattern

from taskmaster.core.exceptions import WorktreeValidationError

DEFAULT_PREFIX = "task"
TASK_ID_PATTERN = r"\d+(?:\.\d+)*"

_TASK_ID_RE = re.compile(rf"^{TASK_ID_PATTERN}$")


@lru_cache(maxsize=8)
def managed_name_pattern(prefix: str = DEFAULT_PREFIX) -> Pattern[str]:
    """Regex matching ``<prefix>-<taskId>``; group 1 is the task id."""
    return re.compile(rf"^{re.escape(prefix)}-({TASK_ID_PATTERN})$")


def validate_task_id(task_id: object) -> str:
    value = str(task_id).strip() if task_id is not None else ""
    if not _TASK_ID_RE.match(value):
        raise WorktreeValidationError(
            f"Invalid task id '{task_id}'. Use a numeric id such as '7' or '1.2'.",
            context={"taskId": task_id},
        )
    return value


def worktree_id_for(task_id: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Worktree id (also the branch and directory name) for ``task_id``."""
    return f"{prefix}-{validate_task_id(task_id)}"


def task_id_from_name(name: str, prefix: str = DEFAULT_PREFIX) -> Optional[str]:
    """Extract the task id from a managed name, or None when it is not managed."""
    match = managed_name_pattern(prefix).match(name or "")
    return match.group(1) if match else None


def validate_worktree_id(worktree_id: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Return the task id encoded in ``worktree_id``.

    Raises:
        WorktreeValidationError: ``worktree_id`` is not ``<prefix>-<taskId>``.
    """
    task_id = task_id_from_name(str(worktree_id or "").strip(), prefix)
    if task_id is None:
        raise WorktreeValidationError(
            f"Invalid worktree id '{worktree_id}'. Expected '{prefix}-<taskId>', e.g. '{prefix}-101'.",
            context={"worktreeId": worktree_id, "prefix": prefix},
        )
    return task_id


__all__ = [
    "DEFAULT_PREFIX",
    "TASK_ID_PATTERN",
    "managed_name_pattern",
    "task_id_from_name",
    "validate_task_id",
    "validate_worktree_id",
    "worktree_id_for",
]
