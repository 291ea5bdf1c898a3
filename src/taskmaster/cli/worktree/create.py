"""
Taskmaster worktree create command.

SUMMARY: Create a git worktree for a task
"""

from __future__ import annotations

import argparse

from taskmaster.cli import OutputFormatter, add_standard_flags, get_repo_root
from taskmaster.cli.worktree import _common

SUMMARY = "Create a git worktree for a task"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "task_id",
        type=str,
        help="Task ID to create a worktree for (e.g. 7 or 1.2)",
    )
    parser.add_argument(
        "--base",
        dest="base_branch",
        type=str,
        help="Branch to create the task branch from (default: worktrees.defaultBaseBranch)",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Create a worktree - delegates to WorktreeManager."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        result = _common.build_manager().create(repo_root, args.task_id, args.base_branch)

        if args.json:
            formatter.json_output(result.to_dict())
        else:
            formatter.text(f"Created worktree for task {result.task_id}")
            formatter.text_kv("Path", result.path)
            formatter.text_kv("Branch", result.branch + (" (existing)" if result.branch_reused else ""))
            formatter.text_kv("Base", result.base_branch)
            for warning in result.warnings:
                formatter.text(f"Warning: {warning}")
        return 0

    except Exception as e:
        formatter.error(e, error_code="worktree_create_error")
        return 1
