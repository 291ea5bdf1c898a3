"""Domain-specific configuration accessors.

Each domain config extends BaseDomainConfig and provides typed, cached access
to one section of the taskmaster configuration.

Available domain configs:
- FeaturesConfig: Feature gates (``features.worktrees``)
- WorktreesConfig: Worktree layout, naming and registry location
- TimeoutsConfig: Subprocess timeouts
- LoggingConfig: Log file destination and level
"""
from __future__ import annotations

from .features import FeaturesConfig, is_worktree_feature_enabled
from .logging import LoggingConfig
from .timeouts import TimeoutsConfig
from .worktrees import WorktreesConfig

__all__: list[str] = [
    "FeaturesConfig",
    "LoggingConfig",
    "TimeoutsConfig",
    "WorktreesConfig",
    "is_worktree_feature_enabled",
]
