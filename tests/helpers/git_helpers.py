"""Git operation helpers for tests that use a real repository."""
from __future__ import annotations

from pathlib import Path

from taskmaster.core.utils.subprocess import run_with_timeout


def git(repo_path: Path, *args: str) -> str:
    """Run ``git <args>`` in ``repo_path`` and return stripped stdout."""
    result = run_with_timeout(
        ["git", *args],
        cwd=repo_path,
        check=True,
        capture_output=True,
        text=True,
    )
    return (result.stdout or "").strip()


def git_init(repo_path: Path, branch: str = "main") -> None:
    """Initialize a repository whose first branch is ``branch``."""
    git(repo_path, "init")
    git(repo_path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")


def git_commit(repo_path: Path, message: str, allow_empty: bool = False) -> None:
    git(repo_path, "add", "-A")
    cmd = ["commit", "-m", message]
    if allow_empty:
        cmd.append("--allow-empty")
    git(repo_path, *cmd)


def branch_exists(repo_path: Path, branch: str) -> bool:
    result = run_with_timeout(
        ["git", "show-ref", "--verify", "--quiet", f"refs/heads/{branch}"],
        cwd=repo_path,
        capture_output=True,
        text=True,
    )
    return result.returncode == 0


def live_worktree_paths(repo_path: Path) -> list[Path]:
    out = git(repo_path, "worktree", "list", "--porcelain")
    return [
        Path(line.split(" ", 1)[1]).resolve()
        for line in out.splitlines()
        if line.startswith("worktree ")
    ]
