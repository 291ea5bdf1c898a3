"""Domain-specific configuration for worktree orchestration.

Provides cached access to worktree layout, naming, and registry location.
"""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig

DEFAULT_DIRECTORY = "worktrees"
DEFAULT_PREFIX = "task"
DEFAULT_MAIN_BRANCH = "main"
DEFAULT_REGISTRY_FILE = ".taskmaster/worktree-registry.json"
DEFAULT_MINIMUM_GIT_VERSION = "2.5.0"


class WorktreesConfig(BaseDomainConfig):
    """Typed access to the ``worktrees`` configuration section.

    Relative paths (``directory``, ``registryFile``) resolve against the
    project root.
    """

    def _config_section(self) -> str:
        return "worktrees"

    def _resolve(self, raw: str) -> Path:
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = self.repo_root / path
        return path

    @cached_property
    def directory(self) -> str:
        return str(self.section.get("directory") or DEFAULT_DIRECTORY)

    @cached_property
    def prefix(self) -> str:
        return str(self.section.get("prefix") or DEFAULT_PREFIX)

    @cached_property
    def main_branch(self) -> str:
        """Branch that worktree branches must be merged into before deletion."""
        return str(self.section.get("mainBranch") or DEFAULT_MAIN_BRANCH)

    @cached_property
    def default_base_branch(self) -> str:
        return str(self.section.get("defaultBaseBranch") or self.main_branch)

    @cached_property
    def worktrees_root(self) -> Path:
        """Absolute directory holding every managed worktree."""
        return self._resolve(self.directory)

    @cached_property
    def registry_path(self) -> Path:
        return self._resolve(str(self.section.get("registryFile") or DEFAULT_REGISTRY_FILE))

    @cached_property
    def minimum_git_version(self) -> str:
        return str(self.section.get("minimumGitVersion") or DEFAULT_MINIMUM_GIT_VERSION)


__all__ = ["WorktreesConfig"]
