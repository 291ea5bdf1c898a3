"""
Taskmaster worktree list command.

SUMMARY: List git worktrees, marking task worktrees
"""

from __future__ import annotations

import argparse

from taskmaster.cli import OutputFormatter, add_standard_flags, get_repo_root
from taskmaster.cli.worktree import _common

SUMMARY = "List git worktrees, marking task worktrees"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--managed-only",
        action="store_true",
        help="Only show worktrees that follow the task naming convention",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        worktrees = _common.build_manager().list_worktrees(repo_root)
        if args.managed_only:
            worktrees = [w for w in worktrees if w.is_managed]

        if args.json:
            formatter.json_output({"worktrees": [w.to_dict() for w in worktrees], "count": len(worktrees)})
            return 0

        if not worktrees:
            formatter.text("No worktrees found.")
            return 0
        for wt in worktrees:
            label = f"task {wt.task_id}" if wt.is_managed else "-"
            branch = wt.branch or ("(detached)" if wt.detached else "(bare)" if wt.bare else "")
            formatter.text(f"{wt.path}  {branch}  [{label}]")
        return 0

    except Exception as e:
        formatter.error(e, error_code="worktree_list_error")
        return 1
