"""``GitGateway``: the ``VcsClient`` implementation backed by the git binary.

Every method runs one or more git subprocesses through ``run_git_command`` so
the configured ``timeouts.git_operations_seconds`` applies. Failures raise
``VcsError`` carrying git's own message.
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from taskmaster.core.exceptions import DirtyWorktreeError, VcsError
from taskmaster.core.utils.subprocess import run_git_command

from .client import LiveWorktree, WorktreeAddResult, WorktreeInfo
from .parsing import clean_git_error, parse_git_version, parse_worktree_list, version_tuple

logger = logging.getLogger(__name__)

MINIMUM_GIT_VERSION = "2.5.0"
DIRTY_MARKER = "contains modified or untracked files"


class GitGateway:
    """Stateless wrapper around the ``git`` command line."""

    def __init__(self, git: str = "git") -> None:
        self.git = git

    def _run(self, args: Sequence[str], cwd: Path | str) -> subprocess.CompletedProcess:
        if not Path(cwd).is_dir():
            raise VcsError(
                f"Cannot run git {args[0]}: directory {cwd} does not exist.",
                context={"cwd": str(cwd)},
            )
        try:
            return run_git_command([self.git, *args], cwd=cwd)
        except FileNotFoundError as exc:
            raise VcsError(
                f"git executable '{self.git}' not found. Install git {MINIMUM_GIT_VERSION} or newer."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise VcsError(
                f"git {' '.join(args)} timed out after {exc.timeout}s. "
                "Raise timeouts.git_operations_seconds or set it to null."
            ) from exc

    def _checked(self, args: Sequence[str], cwd: Path | str, action: str) -> subprocess.CompletedProcess:
        result = self._run(args, cwd)
        if result.returncode != 0:
            message = clean_git_error(result.stderr, result.stdout)
            raise VcsError(
                f"Error {action}: {message}",
                context={"command": ["git", *args], "cwd": str(cwd), "returncode": result.returncode},
            )
        return result

    # ---------------------------------------------------------------- version

    def validate_version(self, minimum: str = MINIMUM_GIT_VERSION, cwd: Optional[Path] = None) -> str:
        """Check that git is installed and at least ``minimum``.

        ``cwd`` defaults to the process working directory.

        Returns:
            The detected version string, e.g. ``"2.39.5"``.

        Raises:
            VcsError: git is missing, its version is unparseable, or too old.
        """
        if cwd is None:
            try:
                cwd = Path.cwd()
            except OSError as exc:
                raise VcsError(
                    "Cannot run git --version: the current directory no longer exists. "
                    "cd into the project root and try again."
                ) from exc
        result = self._run(["--version"], cwd=cwd)
        output = (result.stdout or "").strip()
        parsed = parse_git_version(output)
        if result.returncode != 0 or parsed is None:
            raise VcsError(
                f"Could not parse Git version from output: {output or clean_git_error(result.stderr)}"
            )
        found = ".".join(str(p) for p in parsed)
        if parsed < version_tuple(minimum):
            raise VcsError(
                f"Git version {found} is too old. Worktree support requires Git {minimum} or newer. "
                "Please upgrade git.",
                context={"found": found, "minimum": minimum},
            )
        logger.debug("git version %s satisfies minimum %s", found, minimum)
        return found

    # -------------------------------------------------------------- worktrees

    def create_worktree(
        self, root: Path, branch: str, path: Path, base_branch: str
    ) -> WorktreeAddResult:
        """Add a worktree at ``path`` on ``branch``.

        An existing branch is checked out as-is; otherwise it is created from
        ``base_branch``.
        """
        reused = self.branch_exists(root, branch)
        if reused:
            args = ["worktree", "add", str(path), branch]
        else:
            args = ["worktree", "add", "-b", branch, str(path), base_branch]
        result = self._checked(args, root, "creating worktree")
        logger.info(
            "git worktree add %s (branch=%s, reused=%s, base=%s)", path, branch, reused, base_branch
        )
        output = "\n".join(s.strip() for s in (result.stdout, result.stderr) if s and s.strip())
        return WorktreeAddResult(branch_reused=reused, output=output)

    def remove_worktree(self, root: Path, path: Path, force: bool = False) -> None:
        """Remove the worktree at ``path``.

        Raises:
            DirtyWorktreeError: git refused because of local changes.
            VcsError: any other git failure.
        """
        args = ["worktree", "remove", *(["--force"] if force else []), str(path)]
        result = self._run(args, root)
        if result.returncode == 0:
            logger.info("git worktree remove %s (force=%s)", path, force)
            return
        message = clean_git_error(result.stderr, result.stdout)
        if DIRTY_MARKER in message:
            raise DirtyWorktreeError(
                f"Worktree {path} has uncommitted changes. "
                "Commit or stash them, or remove with force to discard them.",
                context={"path": str(path), "git": message},
            )
        raise VcsError(f"Error removing worktree: {message}", context={"path": str(path)})

    def list_worktrees(self, root: Path) -> List[LiveWorktree]:
        result = self._checked(["worktree", "list", "--porcelain"], root, "listing worktrees")
        return parse_worktree_list(result.stdout or "")

    def is_worktree(self, path: Path) -> bool:
        """True when ``path`` is a linked worktree (``.git`` is a ``gitdir:`` file)."""
        marker = Path(path) / ".git"
        if not marker.is_file():
            return False
        try:
            head = marker.read_text(encoding="utf-8", errors="replace")[:64]
        except OSError:
            return False
        return head.lstrip().startswith("gitdir:")

    def get_worktree_info(self, path: Path) -> Optional[WorktreeInfo]:
        """Describe the linked worktree at ``path``, or None when it is not one."""
        path = Path(path)
        if not self.is_worktree(path):
            return None
        result = self._run(["rev-parse", "--path-format=absolute", "--git-common-dir"], path)
        if result.returncode != 0:
            logger.warning(
                "Could not resolve common git dir for %s: %s", path, clean_git_error(result.stderr)
            )
            return None
        common_dir = Path((result.stdout or "").strip())
        return WorktreeInfo(
            branch=self.current_branch(path),
            main_repo_path=common_dir.parent.resolve(),
            current_path=path.resolve(),
        )

    # --------------------------------------------------------------- branches

    def branch_exists(self, root: Path, branch: str) -> bool:
        result = self._run(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"], root)
        return result.returncode == 0

    def current_branch(self, path: Path) -> Optional[str]:
        """Branch checked out at ``path``; None when detached or not a checkout."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], path)
        name = (result.stdout or "").strip()
        if result.returncode != 0 or not name or name == "HEAD":
            return None
        return name

    def has_uncommitted_changes(self, path: Path) -> bool:
        """True when ``git status --porcelain`` reports anything (untracked included)."""
        result = self._checked(["status", "--porcelain"], path, "checking worktree status")
        return bool((result.stdout or "").strip())

    def is_unmerged(self, root: Path, branch: str, main_branch: str) -> bool:
        """True when ``branch`` has commits not reachable from ``main_branch``.

        A branch that does not exist has nothing to lose and is not unmerged.
        """
        if not self.branch_exists(root, branch):
            return False
        tip = self._checked(["rev-parse", f"refs/heads/{branch}"], root, "resolving branch").stdout.strip()
        base = self._run(["merge-base", branch, main_branch], root)
        if base.returncode == 1 and not (base.stderr or "").strip():
            # No common ancestor at all.
            return True
        if base.returncode != 0:
            raise VcsError(
                f"Error finding merge-base of {branch} and {main_branch}: "
                f"{clean_git_error(base.stderr, base.stdout)}"
            )
        return (base.stdout or "").strip() != tip

    def delete_branch(self, root: Path, branch: str) -> None:
        """Delete a local branch.

        Uses ``-D``: callers check reachability with ``is_unmerged`` first, and
        ``-d`` would compare against the current HEAD instead of the main branch.
        """
        self._checked(["branch", "-D", branch], root, f"deleting branch {branch}")
        logger.info("Deleted branch %s", branch)


__all__ = ["GitGateway", "MINIMUM_GIT_VERSION"]
