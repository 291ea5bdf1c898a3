"""
Taskmaster worktree remove command.

SUMMARY: Remove a task worktree (optionally with its branch)
"""

from __future__ import annotations

import argparse

from taskmaster.cli import (
    OutputFormatter,
    add_force_flag,
    add_standard_flags,
    add_yes_flag,
    confirm_prompt,
    get_repo_root,
)
from taskmaster.cli.worktree import _common

SUMMARY = "Remove a task worktree (optionally with its branch)"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "worktree_id",
        type=str,
        help="Worktree ID to remove (e.g. task-7)",
    )
    add_force_flag(parser, "Discard uncommitted changes (not allowed with --remove-branch)")
    parser.add_argument(
        "--remove-branch",
        action="store_true",
        help="Also delete the branch; requires a clean worktree merged into the main branch",
    )
    add_yes_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Remove a worktree - delegates to WorktreeManager."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        result = _common.build_manager().remove(
            repo_root,
            args.worktree_id,
            force=args.force,
            remove_branch=args.remove_branch,
            confirm=None if args.yes else confirm_prompt,
        )

        if result.cancelled:
            formatter.success(
                result.to_dict(),
                f"Removal of {result.worktree_id} cancelled; nothing was changed.",
                status="cancelled",
            )
            return 0

        if args.json:
            formatter.json_output(result.to_dict())
        else:
            what = "Worktree and branch" if result.branch_removed else "Worktree"
            formatter.text(f"{what} {result.worktree_id} removed")
            formatter.text_kv("Path", result.path)
            for warning in result.warnings:
                formatter.text(f"Warning: {warning}")
        return 0

    except Exception as e:
        formatter.error(e, error_code="worktree_remove_error")
        return 1
