"""In-process publish/subscribe for worktree lifecycle notifications.

The manager emits only after a mutation has succeeded. Delivery is synchronous
and in subscription order; a failing handler is logged and skipped.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

WORKTREE_CREATED = "worktree.created"
WORKTREE_REMOVED = "worktree.removed"

Handler = Callable[[Any], None]


@dataclass(frozen=True)
class WorktreeCreatedEvent:
    task_id: str
    path: str
    branch: str
    base_branch: str
    worktree_id: str

    kind = WORKTREE_CREATED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "taskId": self.task_id,
            "path": self.path,
            "branch": self.branch,
            "baseBranch": self.base_branch,
            "worktreeId": self.worktree_id,
        }


@dataclass(frozen=True)
class WorktreeRemovedEvent:
    task_id: str
    worktree_id: str
    path: str
    branch: Optional[str]
    branch_removed: bool

    kind = WORKTREE_REMOVED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "taskId": self.task_id,
            "worktreeId": self.worktree_id,
            "path": self.path,
            "branch": self.branch,
            "branchRemoved": self.branch_removed,
        }


class EventBus:
    """Synchronous event dispatcher keyed by event kind."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, kind: str, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``kind``.

        Returns:
            A callable that removes this subscription. Calling it twice is a no-op.
        """
        with self._lock:
            self._handlers.setdefault(kind, []).append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(kind, [])
                if handler in handlers:
                    handlers.remove(handler)

        return _unsubscribe

    def emit(self, kind: str, payload: Any) -> int:
        """Deliver ``payload`` to every handler of ``kind``.

        Returns the number of handlers that completed without raising.
        """
        with self._lock:
            handlers = list(self._handlers.get(kind, []))
        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, kind)
                continue
            delivered += 1
        logger.debug("Emitted %s to %d/%d handlers", kind, delivered, len(handlers))
        return delivered

    def subscriber_count(self, kind: str) -> int:
        with self._lock:
            return len(self._handlers.get(kind, []))

    def clear(self) -> None:
        """Drop every subscription."""
        with self._lock:
            self._handlers.clear()


worktree_events = EventBus()


__all__ = [
    "EventBus",
    "WORKTREE_CREATED",
    "WORKTREE_REMOVED",
    "WorktreeCreatedEvent",
    "WorktreeRemovedEvent",
    "worktree_events",
]
