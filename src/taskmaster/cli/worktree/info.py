"""
Taskmaster worktree info command.

SUMMARY: Show whether a directory is a linked worktree and where its repository is
"""

from __future__ import annotations

import argparse
from pathlib import Path

from taskmaster.cli import OutputFormatter, add_standard_flags
from taskmaster.cli.worktree import _common

SUMMARY = "Show whether a directory is a linked worktree and where its repository is"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        type=str,
        help="Directory to inspect (default: current directory)",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        target = Path(args.path).expanduser() if args.path else Path.cwd()
        info = _common.build_manager().vcs.get_worktree_info(target)

        if info is None:
            formatter.success(
                {"isWorktree": False, "currentPath": str(target.resolve())},
                f"{target.resolve()} is not a linked worktree.",
            )
            return 0

        if args.json:
            formatter.json_output({"isWorktree": True, **info.to_dict()})
        else:
            formatter.text(f"{info.current_path} is a linked worktree")
            formatter.text_kv("Branch", info.branch or "(detached)")
            formatter.text_kv("Main repository", info.main_repo_path)
        return 0

    except Exception as e:
        formatter.error(e, error_code="worktree_info_error")
        return 1
