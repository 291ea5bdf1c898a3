"""
Taskmaster CLI package.

Provides the command-line interface with auto-discovery of commands
from subfolders (worktree/, ...).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import (
    add_force_flag,
    add_json_flag,
    add_repo_root_flag,
    add_standard_flags,
    add_yes_flag,
)
from ._utils import confirm_prompt, get_repo_root

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_repo_root_flag",
    "add_force_flag",
    "add_yes_flag",
    "add_standard_flags",
    # Utilities
    "get_repo_root",
    "confirm_prompt",
]
