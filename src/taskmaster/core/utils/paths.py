"""Project root and config directory resolution.

Resolution priority for the project root:
1. ``TASKMASTER_PROJECT_ROOT`` environment variable
2. Main repository root of the git checkout containing the CWD

Running from inside a linked worktree resolves to the *main* repository, so
worktree commands always operate on the primary checkout's registry.
"""
from __future__ import annotations

import os
import subprocess
from pathlib import Path

from taskmaster.core.exceptions import ConfigError

PROJECT_ROOT_ENV = "TASKMASTER_PROJECT_ROOT"
DEFAULT_PROJECT_CONFIG_DIR = ".taskmaster"


def resolve_project_root(start: Path | None = None) -> Path:
    """Resolve the project root.

    Raises:
        ConfigError: If no root can be determined.
    """
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.is_dir():
            raise ConfigError(f"{PROJECT_ROOT_ENV} points at missing directory: {env_path}")
        return env_path

    cwd = (start or Path.cwd()).resolve()
    # Config loading may need the root, so this must not depend on configured timeouts.
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--path-format=absolute", "--git-common-dir"],
            cwd=str(cwd),
            text=True,
            capture_output=True,
            check=True,
            timeout=10,
        )
    except FileNotFoundError as exc:
        raise ConfigError(
            f"git executable not found on PATH; set {PROJECT_ROOT_ENV} to your project root."
        ) from exc
    except subprocess.CalledProcessError as exc:
        raise ConfigError(
            "Unable to resolve project root via git. "
            f"Set {PROJECT_ROOT_ENV} or run inside a git repository."
        ) from exc

    common_dir = Path((result.stdout or "").strip())
    if not str(common_dir):
        raise ConfigError("git rev-parse returned empty output; cannot resolve project root.")
    # Common dir is <main repo>/.git
    return common_dir.parent.resolve()


def get_project_config_dir(repo_root: Path) -> Path:
    """Return ``<repo_root>/.taskmaster`` (overridable via ``TASKMASTER_paths__project_config_dir``)."""
    name = os.environ.get("TASKMASTER_paths__project_config_dir") or DEFAULT_PROJECT_CONFIG_DIR
    return Path(repo_root) / name


__all__ = [
    "PROJECT_ROOT_ENV",
    "DEFAULT_PROJECT_CONFIG_DIR",
    "resolve_project_root",
    "get_project_config_dir",
]
