from __future__ import annotations

from typing import Any, Dict, Mapping


class TaskmasterError(Exception):
    """Base exception for taskmaster."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(TaskmasterError, ValueError):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        TaskmasterError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class WorktreeError(TaskmasterError, RuntimeError):
    """Raised for errors in worktree creation, removal, or inspection."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        TaskmasterError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class FeatureDisabledError(WorktreeError):
    """Raised when the worktrees feature gate is off for the project."""


class WorktreeNotFoundError(WorktreeError, FileNotFoundError):
    """Raised when a worktree directory or registry entry does not exist."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        WorktreeError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


NotFoundError = WorktreeNotFoundError


class DirtyWorktreeError(WorktreeError):
    """Raised when a worktree has modified or untracked files."""


class UnmergedBranchError(WorktreeError):
    """Raised when a branch has commits that are not reachable from the main branch."""


class SelfRemovalError(WorktreeError):
    """Raised when the caller's working directory is inside the worktree being removed."""


class ForceNotSupportedError(WorktreeError):
    """Raised when force is requested together with branch deletion."""


class WorktreeValidationError(WorktreeError, ValueError):
    """Raised when a task id or worktree id does not follow the naming convention."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        WorktreeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class VcsError(WorktreeError):
    """Raised when a git command fails. The message holds git's own output."""


class RegistryError(WorktreeError):
    """Raised when the worktree registry cannot be read, validated, or written."""


__all__ = [
    "TaskmasterError",
    "ConfigError",
    "WorktreeError",
    "FeatureDisabledError",
    "WorktreeNotFoundError",
    "NotFoundError",
    "DirtyWorktreeError",
    "UnmergedBranchError",
    "SelfRemovalError",
    "ForceNotSupportedError",
    "WorktreeValidationError",
    "VcsError",
    "RegistryError",
]
