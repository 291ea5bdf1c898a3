"""Feature gates."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Optional

from ..base import BaseDomainConfig


class FeaturesConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "features"

    @cached_property
    def worktrees_enabled(self) -> bool:
        """Whether worktree orchestration is enabled (``features.worktrees``)."""
        return bool(self.section.get("worktrees", False))


def is_worktree_feature_enabled(repo_root: Optional[Path] = None) -> bool:
    """Return True when the worktrees feature is enabled for ``repo_root``.

    Reads configuration fresh on every call; the config cache is invalidated by
    file edits and environment changes, so toggling the gate mid-session works.
    """
    return FeaturesConfig(repo_root=repo_root).worktrees_enabled


__all__ = ["FeaturesConfig", "is_worktree_feature_enabled"]
