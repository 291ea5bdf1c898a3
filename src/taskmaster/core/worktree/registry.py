"""Durable JSON registry of managed worktrees.

The registry is an advisory mirror of git's state: ``git worktree list`` is
authoritative, and ``RegistryReconciler`` purges entries that drift from it.
Writes are atomic (temp file + fsync + rename) but unlocked, so concurrent
writers race and the last one wins.

File layout::

    {
      "worktrees": {"task-7": {"worktreeId": ..., "taskId": ..., "branch": ...,
                                "path": ..., "createdAt": ...}},
      "metadata": {"created": ..., "updated": ..., "version": "1.0"}
    }
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from taskmaster.core.exceptions import RegistryError, WorktreeNotFoundError
from taskmaster.core.schemas import validate_payload_safe
from taskmaster.core.utils.io import read_json, write_json_atomic
from taskmaster.core.utils.time import utc_timestamp

from .models import WorktreeEntry

logger = logging.getLogger(__name__)

REGISTRY_VERSION = "1.0"
DEFAULT_REGISTRY_FILE = Path(".taskmaster") / "worktree-registry.json"


def entry_errors(worktree_id: str, raw: Any) -> List[str]:
    """Schema errors for one stored entry; a missing ``worktreeId`` defaults to its key."""
    if not isinstance(raw, dict):
        return [f"entry is a {type(raw).__name__}, not an object"]
    return validate_payload_safe({"worktreeId": worktree_id, **raw}, "worktree-entry")


def empty_registry() -> Dict[str, Any]:
    now = utc_timestamp()
    return {
        "worktrees": {},
        "metadata": {"created": now, "updated": now, "version": REGISTRY_VERSION},
    }


class WorktreeRegistry:
    """Read-modify-write access to one project's registry file."""

    def __init__(self, repo_root: Path, registry_path: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root)
        self.path = Path(registry_path) if registry_path is not None else self.repo_root / DEFAULT_REGISTRY_FILE

    def read(self) -> Dict[str, Any]:
        """Load the registry.

        A missing file yields a fresh empty structure and is not an error.

        Raises:
            RegistryError: The file is unreadable, not JSON, or its envelope is
                malformed. Individual bad entries do not raise; see ``entries``.
        """
        if not self.path.exists():
            return empty_registry()
        try:
            data = read_json(self.path)
        except (OSError, json.JSONDecodeError) as exc:
            raise RegistryError(
                f"Failed to read worktree registry {self.path}: {exc}. "
                "Fix or delete the file; it is rebuilt as worktrees are created.",
                context={"path": str(self.path)},
            ) from exc
        self._validate(data)
        return data

    def write(self, data: Dict[str, Any]) -> None:
        """Stamp ``metadata.updated`` and atomically replace the registry file."""
        metadata = dict(data.get("metadata") or {})
        now = utc_timestamp()
        metadata.setdefault("created", now)
        metadata.setdefault("version", REGISTRY_VERSION)
        metadata["updated"] = now
        final = {**data, "metadata": metadata}
        final.setdefault("worktrees", {})
        self._validate(final)
        try:
            write_json_atomic(self.path, final)
        except OSError as exc:
            raise RegistryError(
                f"Failed to write worktree registry {self.path}: {exc}. "
                "Check permissions on the .taskmaster directory.",
                context={"path": str(self.path)},
            ) from exc

    def _validate(self, data: Any) -> None:
        errors = validate_payload_safe(data, "worktree-registry")
        if errors:
            raise RegistryError(
                f"Worktree registry {self.path} is malformed: {'; '.join(errors)}",
                context={"path": str(self.path), "errors": errors},
            )

    # ------------------------------------------------------------------ CRUD

    def add(self, entry: Union[WorktreeEntry, Mapping[str, Any]]) -> WorktreeEntry:
        """Insert or replace the entry keyed by its ``worktreeId``.

        Raises:
            RegistryError: Required fields are missing, or the file cannot be written.
        """
        raw = entry.to_dict() if isinstance(entry, WorktreeEntry) else dict(entry)
        errors = validate_payload_safe(raw, "worktree-entry")
        if errors:
            raise RegistryError(
                "Registry entry must have worktreeId, taskId, branch, and path: " + "; ".join(errors),
                context={"entry": raw},
            )
        if not raw.get("createdAt"):
            raw["createdAt"] = utc_timestamp()

        data = self.read()
        data["worktrees"][raw["worktreeId"]] = raw
        self.write(data)
        logger.info("Registered worktree %s for task %s", raw["worktreeId"], raw["taskId"])
        return WorktreeEntry.from_dict(raw)

    def remove(self, worktree_id: str) -> None:
        """Delete one entry.

        Raises:
            WorktreeNotFoundError: No entry with this id.
        """
        data = self.read()
        if worktree_id not in data["worktrees"]:
            raise WorktreeNotFoundError(
                f"Worktree '{worktree_id}' not found in registry {self.path}.",
                context={"worktreeId": worktree_id},
            )
        del data["worktrees"][worktree_id]
        self.write(data)
        logger.info("Unregistered worktree %s", worktree_id)

    def _valid_entries(self) -> Iterator[Tuple[str, WorktreeEntry]]:
        for worktree_id, raw in self.read()["worktrees"].items():
            if entry_errors(worktree_id, raw):
                logger.debug("Skipping malformed registry entry %s", worktree_id)
                continue
            yield worktree_id, WorktreeEntry.from_dict(raw, worktree_id)

    def get(self, worktree_id: str) -> Optional[WorktreeEntry]:
        for key, entry in self._valid_entries():
            if key == worktree_id:
                return entry
        return None

    def find_by_task_id(self, task_id: str) -> Optional[WorktreeEntry]:
        """First entry whose ``taskId`` equals ``task_id``, or None."""
        for _, entry in self._valid_entries():
            if entry.task_id == str(task_id):
                return entry
        return None

    def entries(self) -> List[WorktreeEntry]:
        """Every well-formed entry. Malformed ones are left for ``RegistryReconciler`` to purge."""
        return [entry for _, entry in self._valid_entries()]


__all__ = ["DEFAULT_REGISTRY_FILE", "REGISTRY_VERSION", "WorktreeRegistry", "empty_registry", "entry_errors"]
