"""I/O utilities for taskmaster.

This package provides safe, atomic file operations:
- Core: atomic writes, directory management
- JSON: read/atomic write
- YAML: read
"""
from __future__ import annotations

from .core import (
    atomic_write,
    ensure_directory,
    ensure_parent_dir,
    iter_yaml_files,
)
from .json import (
    read_json,
    write_json_atomic,
)
from .yaml import (
    read_yaml,
)

__all__ = [
    # core
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "iter_yaml_files",
    # json
    "read_json",
    "write_json_atomic",
    # yaml
    "read_yaml",
]
