"""Domain-specific configuration for operation timeouts.

Every key is ``<type>_seconds``; a ``null`` value disables the timeout.
"""
from __future__ import annotations

from functools import cached_property
from typing import Dict, Optional

from ..base import BaseDomainConfig


class TimeoutsConfig(BaseDomainConfig):
    """Typed access to ``timeouts.*_seconds``."""

    def _config_section(self) -> str:
        return "timeouts"

    def seconds_for(self, timeout_type: str) -> Optional[float]:
        """Return the timeout for ``timeout_type`` or None when disabled.

        Unknown types fall back to ``default_seconds``.
        """
        key = f"{timeout_type}_seconds"
        value = self.section.get(key, self.section.get("default_seconds"))
        if value is None:
            return None
        return float(value)

    @cached_property
    def git_operations_seconds(self) -> Optional[float]:
        """Timeout for git subprocesses in seconds."""
        return self.seconds_for("git_operations")

    @cached_property
    def default_seconds(self) -> Optional[float]:
        return self.seconds_for("default")

    def get_all_settings(self) -> Dict[str, Optional[float]]:
        """Get all timeout settings as a dict."""
        return {
            key: (None if value is None else float(value))
            for key, value in self.section.items()
        }


__all__ = [
    "TimeoutsConfig",
]
