"""Worktree lifecycle orchestration.

``WorktreeManager`` coordinates git (authoritative), the registry (best-effort
mirror) and the event bus (notification), always in that order. A failure to
update the registry never fails an operation whose git mutation succeeded; it
is logged and reported in the result's ``warnings``, and the next
reconciliation repairs it.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from taskmaster.core.config.domains import WorktreesConfig, is_worktree_feature_enabled
from taskmaster.core.exceptions import (
    DirtyWorktreeError,
    FeatureDisabledError,
    ForceNotSupportedError,
    RegistryError,
    SelfRemovalError,
    UnmergedBranchError,
    WorktreeNotFoundError,
)
from taskmaster.core.git import GitGateway, VcsClient
from taskmaster.core.utils.io import ensure_directory

from .events import (
    WORKTREE_CREATED,
    WORKTREE_REMOVED,
    EventBus,
    WorktreeCreatedEvent,
    WorktreeRemovedEvent,
    worktree_events,
)
from .models import CreateResult, ManagedWorktree, RemoveResult, SyncReport, WorktreeEntry
from .naming import task_id_from_name, validate_task_id, validate_worktree_id, worktree_id_for
from .reconcile import RegistryReconciler
from .registry import WorktreeRegistry

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


def _is_within(path: Path, target: Path) -> bool:
    """True when ``path`` equals ``target`` or lies beneath it."""
    p = os.path.normcase(str(path))
    t = os.path.normcase(str(target))
    return p == t or p.startswith(t.rstrip(os.sep) + os.sep)


class WorktreeManager:
    """Create, remove, and list per-task git worktrees.

    Args:
        vcs: Version control client. Defaults to ``GitGateway()``.
        events: Bus that receives lifecycle events. Defaults to the
            process-wide ``worktree_events``.
        feature_gate: ``root -> bool``; every operation is refused when it
            returns False. Defaults to ``features.worktrees`` from configuration.
        cwd: Returns the caller's working directory for the self-removal guard.
    """

    def __init__(
        self,
        vcs: Optional[VcsClient] = None,
        *,
        events: Optional[EventBus] = None,
        feature_gate: Optional[Callable[[Path], bool]] = None,
        cwd: Optional[Callable[[], Path]] = None,
    ) -> None:
        self.vcs: VcsClient = vcs if vcs is not None else GitGateway()
        self.events = events if events is not None else worktree_events
        self._feature_gate = feature_gate or is_worktree_feature_enabled
        self._cwd = cwd or Path.cwd
        self._git_version: Optional[str] = None

    # ---------------------------------------------------------------- helpers

    def _require_enabled(self, root: Path) -> Path:
        root = Path(root).resolve()
        if not self._feature_gate(root):
            raise FeatureDisabledError(
                "Worktrees are disabled. Enable in config with features.worktrees: true "
                f"(e.g. in {root / '.taskmaster' / 'config' / 'features.yml'}).",
                context={"root": str(root)},
            )
        return root

    def _ensure_git_version(self, minimum: str, root: Path) -> None:
        if self._git_version is None:
            self._git_version = self.vcs.validate_version(minimum, cwd=root)

    def _registry(self, root: Path, cfg: WorktreesConfig) -> WorktreeRegistry:
        return WorktreeRegistry(root, cfg.registry_path)

    def _reconcile(self, root: Path, registry: WorktreeRegistry, cfg: WorktreesConfig) -> SyncReport:
        return RegistryReconciler(self.vcs, prefix=cfg.prefix).sync(root, registry)

    def _current_dir(self) -> Optional[Path]:
        try:
            return Path(self._cwd()).resolve()
        except OSError as exc:
            # A deleted cwd cannot be inside a live worktree.
            logger.debug("Could not determine current directory: %s", exc)
            return None

    def _guard_self_removal(self, root: Path, worktree_id: str, path: Path) -> None:
        current = self._current_dir()
        if current is not None and _is_within(current, path.resolve()):
            raise SelfRemovalError(
                f"Cannot remove worktree {worktree_id} while inside it. "
                f"You are currently in: {current}. Please navigate out first: cd {root}",
                context={"worktreeId": worktree_id, "cwd": str(current), "path": str(path)},
            )

    def _require_exists(self, root: Path, worktree_id: str, path: Path, cfg: WorktreesConfig) -> None:
        if path.exists():
            return
        current = self._current_dir()
        inside_other = current is not None and (
            _is_within(current, cfg.worktrees_root.resolve()) or self.vcs.is_worktree(current)
        )
        if inside_other:
            message = (
                f"Cannot find worktree '{worktree_id}'. Note: you appear to be inside a worktree. "
                f"Try running from the main project directory: cd {root}"
            )
        else:
            message = (
                f"Worktree '{worktree_id}' does not exist at {path}. "
                "Run 'taskmaster worktree list' to see existing worktrees."
            )
        raise WorktreeNotFoundError(message, context={"worktreeId": worktree_id, "path": str(path)})

    def _unregister(self, registry: WorktreeRegistry, worktree_id: str) -> List[str]:
        try:
            registry.remove(worktree_id)
        except WorktreeNotFoundError:
            logger.info("Worktree %s was not in the registry", worktree_id)
            return []
        except RegistryError as exc:
            logger.warning("Failed to remove worktree %s from registry: %s", worktree_id, exc)
            return [f"Failed to remove worktree from registry: {exc}"]
        return []

    # ------------------------------------------------------------- operations

    def create(self, root: Path, task_id: str, base_branch: Optional[str] = None) -> CreateResult:
        """Create ``<worktrees>/<prefix>-<task_id>`` on branch ``<prefix>-<task_id>``.

        An existing branch of that name is reused; otherwise it is created
        from ``base_branch`` (default ``worktrees.defaultBaseBranch``).

        Raises:
            FeatureDisabledError: Worktrees are disabled.
            WorktreeValidationError: ``task_id`` is malformed.
            VcsError: git is too old or ``git worktree add`` failed.
        """
        root = self._require_enabled(root)
        task_id = validate_task_id(task_id)
        cfg = WorktreesConfig(repo_root=root)
        worktree_id = worktree_id_for(task_id, cfg.prefix)
        branch = worktree_id
        path = cfg.worktrees_root / worktree_id
        base = base_branch or cfg.default_base_branch

        self._ensure_git_version(cfg.minimum_git_version, root)
        ensure_directory(cfg.worktrees_root)

        logger.info("Creating worktree for task %s on branch %s", task_id, branch)
        added = self.vcs.create_worktree(root, branch, path, base)

        result = CreateResult(
            worktree_id=worktree_id,
            task_id=task_id,
            branch=branch,
            path=str(path),
            base_branch=base,
            branch_reused=added.branch_reused,
        )
        try:
            self._registry(root, cfg).add(
                WorktreeEntry(worktree_id=worktree_id, task_id=task_id, branch=branch, path=str(path))
            )
        except RegistryError as exc:
            logger.warning("Failed to add worktree %s to registry: %s", worktree_id, exc)
            result.warnings.append(f"Failed to add worktree to registry: {exc}")

        self.events.emit(
            WORKTREE_CREATED,
            WorktreeCreatedEvent(
                task_id=task_id, path=str(path), branch=branch, base_branch=base, worktree_id=worktree_id
            ),
        )
        return result

    def remove(
        self,
        root: Path,
        worktree_id: str,
        *,
        force: bool = False,
        remove_branch: bool = False,
        confirm: Optional[Confirm] = None,
    ) -> RemoveResult:
        """Remove a managed worktree, keeping its branch.

        With ``remove_branch=True`` this delegates to ``remove_and_branch``.
        A dirty worktree is only removed with ``force=True``; when ``confirm`` is
        given it is asked first and a False answer cancels without changes.

        Raises:
            SelfRemovalError: The current directory is inside the worktree.
            WorktreeNotFoundError: The worktree directory does not exist.
            DirtyWorktreeError: Uncommitted changes and ``force`` is False.
        """
        root = self._require_enabled(root)
        if remove_branch:
            return self.remove_and_branch(root, worktree_id, force=force)

        cfg = WorktreesConfig(repo_root=root)
        task_id = validate_worktree_id(worktree_id, cfg.prefix)
        path = cfg.worktrees_root / worktree_id
        registry = self._registry(root, cfg)

        self._reconcile(root, registry, cfg)
        self._guard_self_removal(root, worktree_id, path)
        self._require_exists(root, worktree_id, path, cfg)

        result = RemoveResult(worktree_id=worktree_id, path=str(path), branch=worktree_id)
        logger.info("Removing %s at %s", worktree_id, path)
        try:
            self.vcs.remove_worktree(root, path)
        except DirtyWorktreeError as exc:
            if not force:
                raise DirtyWorktreeError(
                    f"{worktree_id} has uncommitted changes. "
                    "Please commit or stash changes before removing or try again with --force",
                    context={"worktreeId": worktree_id, "path": str(path)},
                ) from exc
            if confirm is not None:
                prompt = f"{worktree_id} contains uncommitted changes that will be PERMANENTLY LOST. Continue?"
                if not confirm(prompt):
                    logger.info("Removal of %s cancelled by caller", worktree_id)
                    result.cancelled = True
                    return result
            logger.info("Force removing %s with uncommitted changes", worktree_id)
            self.vcs.remove_worktree(root, path, force=True)
            result.forced = True

        result.removed = True
        result.warnings.extend(self._unregister(registry, worktree_id))
        self.events.emit(
            WORKTREE_REMOVED,
            WorktreeRemovedEvent(
                task_id=task_id, worktree_id=worktree_id, path=str(path), branch=worktree_id, branch_removed=False
            ),
        )
        return result

    def remove_and_branch(self, root: Path, worktree_id: str, *, force: bool = False) -> RemoveResult:
        """Remove a clean, fully merged worktree and delete its branch.

        Raises:
            ForceNotSupportedError: ``force`` was requested; checked before anything else.
            DirtyWorktreeError: The worktree has uncommitted changes.
            UnmergedBranchError: The branch has commits not on ``worktrees.mainBranch``.
        """
        if force:
            raise ForceNotSupportedError(
                "--force is not supported together with branch removal. "
                "Drop --force, or remove the worktree alone and delete the branch yourself.",
                context={"worktreeId": worktree_id},
            )
        root = self._require_enabled(root)
        cfg = WorktreesConfig(repo_root=root)
        task_id = validate_worktree_id(worktree_id, cfg.prefix)
        path = cfg.worktrees_root / worktree_id
        branch = worktree_id

        self._guard_self_removal(root, worktree_id, path)
        self._require_exists(root, worktree_id, path, cfg)

        if self.vcs.has_uncommitted_changes(path):
            raise DirtyWorktreeError(
                f"{worktree_id} has uncommitted changes. Please commit or stash changes before removing",
                context={"worktreeId": worktree_id, "path": str(path)},
            )
        if self.vcs.is_unmerged(root, branch, cfg.main_branch):
            raise UnmergedBranchError(
                f"Branch {branch} has unmerged changes. "
                f"Please merge or rebase it onto {cfg.main_branch}, then try again",
                context={"branch": branch, "mainBranch": cfg.main_branch},
            )

        logger.info("Removing %s and branch %s", worktree_id, branch)
        self.vcs.remove_worktree(root, path)
        result = RemoveResult(worktree_id=worktree_id, path=str(path), branch=branch, removed=True)
        result.warnings.extend(self._unregister(self._registry(root, cfg), worktree_id))

        if self.vcs.branch_exists(root, branch):
            self.vcs.delete_branch(root, branch)
            result.branch_removed = True
        else:
            result.warnings.append(f"Branch {branch} did not exist; nothing to delete.")

        self.events.emit(
            WORKTREE_REMOVED,
            WorktreeRemovedEvent(
                task_id=task_id,
                worktree_id=worktree_id,
                path=str(path),
                branch=branch,
                branch_removed=result.branch_removed,
            ),
        )
        return result

    def list_worktrees(self, root: Path) -> List[ManagedWorktree]:
        """Every live git worktree, tagged managed when its directory follows the naming convention."""
        root = self._require_enabled(root)
        cfg = WorktreesConfig(repo_root=root)
        self._reconcile(root, self._registry(root, cfg), cfg)

        listed: List[ManagedWorktree] = []
        for live in self.vcs.list_worktrees(root):
            name = Path(live.path).name
            task_id = task_id_from_name(name, cfg.prefix)
            listed.append(ManagedWorktree.from_live(live, task_id, name if task_id is not None else None))

        managed = sum(1 for w in listed if w.is_managed)
        if managed:
            logger.info("Found %d managed worktree(s)", managed)
        return listed

    def sync(self, root: Path) -> SyncReport:
        """Reconcile the registry with git and return what changed."""
        root = self._require_enabled(root)
        cfg = WorktreesConfig(repo_root=root)
        return self._reconcile(root, self._registry(root, cfg), cfg)


__all__ = ["WorktreeManager"]
