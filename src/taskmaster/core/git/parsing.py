"""Parsers for git command output."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from .client import LiveWorktree

_VERSION_RE = re.compile(r"git version (\d+)\.(\d+)(?:\.(\d+))?")


def parse_worktree_list(stdout: str) -> List[LiveWorktree]:
    """Parse ``git worktree list --porcelain`` output.

    Records are separated by blank lines; each starts with ``worktree <path>``.
    """
    worktrees: List[LiveWorktree] = []
    current: Dict[str, Any] = {}

    def _flush() -> None:
        if current.get("path"):
            worktrees.append(LiveWorktree(**current))
        current.clear()

    for raw in stdout.splitlines():
        line = raw.strip()
        if not line:
            _flush()
            continue

        if line.startswith("worktree "):
            _flush()
            current["path"] = line.split(" ", 1)[1]
        elif line.startswith("HEAD "):
            current["head"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            ref = line.split(" ", 1)[1]
            if ref.startswith("refs/heads/"):
                ref = ref[len("refs/heads/"):]
            current["branch"] = ref
        elif line == "bare":
            current["bare"] = True
        elif line == "detached":
            current["detached"] = True

    _flush()
    return worktrees


def parse_git_version(stdout: str) -> Optional[Tuple[int, int, int]]:
    """Extract ``(major, minor, patch)`` from ``git --version`` output.

    Vendor suffixes are ignored:

        >>> parse_git_version("git version 2.39.3 (Apple Git-146)")
        (2, 39, 3)
    """
    match = _VERSION_RE.search(stdout or "")
    if not match:
        return None
    major, minor, patch = match.groups()
    return int(major), int(minor), int(patch or 0)


def version_tuple(text: str) -> Tuple[int, int, int]:
    """Turn ``"2.5"`` or ``"2.5.0"`` into a comparable tuple."""
    parts = [int(p) for p in text.strip().split(".")[:3]]
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def clean_git_error(stderr: Optional[str], stdout: Optional[str] = None) -> str:
    """Return git's own message without the process wrapper line.

    Prefers stderr; falls back to stdout when git wrote nothing to stderr.
    """
    text = (stderr or "").strip() or (stdout or "").strip()
    text = re.sub(r"^Command failed:.*?(\n|$)", "", text)
    return text.strip()


__all__ = ["clean_git_error", "parse_git_version", "parse_worktree_list", "version_tuple"]
