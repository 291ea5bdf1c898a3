"""Read-repair of the worktree registry against git's live state."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Set

from taskmaster.core.git.client import VcsClient

from .models import SyncReport
from .naming import DEFAULT_PREFIX, task_id_from_name
from .registry import WorktreeRegistry, entry_errors

logger = logging.getLogger(__name__)


def _normalize(path: str | Path) -> str:
    return os.path.normcase(str(Path(path).resolve()))


class RegistryReconciler:
    """Purge registry entries that no longer match a real worktree.

    An entry survives only when it is well formed, its directory exists, and
    git lists it as a worktree. Managed worktrees that git knows about but the
    registry does not are reported in ``SyncReport.issues``; they are not adopted.

    ``sync`` never raises. Failures are logged and recorded as issues, and the
    registry is then left untouched.
    """

    def __init__(self, vcs: VcsClient, prefix: str = DEFAULT_PREFIX) -> None:
        self.vcs = vcs
        self.prefix = prefix

    def sync(self, root: Path, registry: Optional[WorktreeRegistry] = None) -> SyncReport:
        root = Path(root)
        registry = registry or WorktreeRegistry(root)
        report = SyncReport()

        try:
            live = self.vcs.list_worktrees(root)
        except Exception as exc:
            logger.warning("Worktree sync skipped: could not list git worktrees: %s", exc)
            report.issues.append(f"Could not list git worktrees: {exc}")
            return report
        report.vcs_worktrees = len(live)
        live_paths: Set[str] = {_normalize(w.path) for w in live}

        try:
            data = registry.read()
        except Exception as exc:
            logger.warning("Worktree sync skipped: %s", exc)
            report.issues.append(str(exc))
            return report

        worktrees = data.get("worktrees", {})
        report.registry_entries = len(worktrees)
        registered_paths: Set[str] = set()

        for worktree_id, entry in list(worktrees.items()):
            errors = entry_errors(worktree_id, entry)
            if errors:
                logger.warning("Removing malformed registry entry %s: %s", worktree_id, "; ".join(errors))
                report.removed_entries.append(worktree_id)
                continue
            raw_path = entry["path"]
            normalized = _normalize(raw_path)
            if not Path(raw_path).exists():
                logger.info("Removing stale registry entry %s: %s is gone", worktree_id, raw_path)
                report.removed_entries.append(worktree_id)
            elif normalized not in live_paths:
                logger.info("Removing stale registry entry %s: git does not list %s", worktree_id, raw_path)
                report.removed_entries.append(worktree_id)
            else:
                registered_paths.add(normalized)

        for wt in live:
            name = Path(wt.path).name
            if task_id_from_name(name, self.prefix) is None:
                continue
            if _normalize(wt.path) not in registered_paths:
                report.issues.append(
                    f"Managed worktree {wt.path} is not in the registry; it was not adopted."
                )

        if report.changed:
            for worktree_id in report.removed_entries:
                worktrees.pop(worktree_id, None)
            try:
                registry.write(data)
            except Exception as exc:
                logger.warning("Worktree sync could not write registry: %s", exc)
                report.issues.append(f"Could not write registry: {exc}")
                report.removed_entries = []
                return report
            logger.info("Cleaned up %d stale worktree entries", len(report.removed_entries))

        return report


__all__ = ["RegistryReconciler"]
