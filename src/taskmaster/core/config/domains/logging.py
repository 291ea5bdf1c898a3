"""Domain-specific configuration for taskmaster logging.

This config controls:
- Whether the CLI installs a log file handler
- Where the log file is stored (relative paths resolve against the project root)
- The minimum level written to it
"""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def enabled(self) -> bool:
        return bool(self.section.get("enabled", False))

    @cached_property
    def level_name(self) -> str:
        return str(self.section.get("level") or "INFO").upper()

    @cached_property
    def file_path(self) -> Path:
        raw = str(self.section.get("file") or ".taskmaster/logs/taskmaster.log")
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = self.repo_root / path
        return path


__all__ = ["LoggingConfig"]
