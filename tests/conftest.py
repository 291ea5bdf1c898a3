import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'taskmaster' and tests/ as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from taskmaster.core.config.cache import clear_all_caches
from taskmaster.core.logging import reset_stdlib_logging_for_tests
from taskmaster.core.schemas.validation import load_schema
from taskmaster.core.worktree.events import worktree_events
from helpers.git_helpers import git_commit, git_init
from helpers.io_utils import set_worktrees_enabled


@pytest.fixture(autouse=True)
def _reset_taskmaster_state(monkeypatch):
    """Fresh config cache, no leaked overrides, and no leftover subscribers."""
    for key in list(os.environ):
        if key.startswith("TASKMASTER_"):
            monkeypatch.delenv(key, raising=False)
    clear_all_caches()
    worktree_events.clear()
    yield
    clear_all_caches()
    worktree_events.clear()
    load_schema.cache_clear()
    reset_stdlib_logging_for_tests()


@pytest.fixture
def isolated_project_env(tmp_path, monkeypatch) -> Path:
    """
    Isolated project root for tests.

    Sets TASKMASTER_PROJECT_ROOT and chdirs into it so nothing touches the
    developer's checkout.
    """
    root = (tmp_path / "project").resolve()
    root.mkdir()
    monkeypatch.setenv("TASKMASTER_PROJECT_ROOT", str(root))
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def git_env(monkeypatch) -> None:
    """Deterministic git identity, independent of the developer's git config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Taskmaster Tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Taskmaster Tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)


@pytest.fixture
def git_repo(isolated_project_env: Path, git_env) -> Path:
    """A real repository with one commit on ``main`` and worktrees enabled."""
    root = isolated_project_env
    git_init(root)
    (root / "README.md").write_text("# test repo\n", encoding="utf-8")
    (root / ".gitignore").write_text(".taskmaster/\nworktrees/\n", encoding="utf-8")
    git_commit(root, "init")
    set_worktrees_enabled(root)
    return root
