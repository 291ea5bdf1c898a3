"""Taskmaster configuration system.

This package provides centralized configuration management with domain-specific accessors.

Usage:
    from taskmaster.core.config import ConfigManager
    from taskmaster.core.config.domains import WorktreesConfig

    # Direct config manager usage
    manager = ConfigManager(repo_root=Path("/path/to/project"))
    config = manager.load_config()

    # Domain-specific accessors (recommended)
    worktrees = WorktreesConfig(repo_root=Path("/path/to/project"))
    root = worktrees.worktrees_root

    # Cached config access
    from taskmaster.core.config.cache import get_cached_config, clear_all_caches
    config = get_cached_config(repo_root)
"""
from __future__ import annotations

from .manager import ConfigManager
from .cache import get_cached_config, clear_all_caches, is_cached
from .base import BaseDomainConfig

from .domains import (
    FeaturesConfig,
    LoggingConfig,
    TimeoutsConfig,
    WorktreesConfig,
    is_worktree_feature_enabled,
)

__all__ = [
    # Core
    "ConfigManager",
    "BaseDomainConfig",
    # Caching
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
    # Domain configs
    "FeaturesConfig",
    "LoggingConfig",
    "TimeoutsConfig",
    "WorktreesConfig",
    "is_worktree_feature_enabled",
]
