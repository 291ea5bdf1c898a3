"""
Taskmaster worktree sync command.

SUMMARY: Remove stale entries from the worktree registry
"""

from __future__ import annotations

import argparse

from taskmaster.cli import OutputFormatter, add_standard_flags, get_repo_root
from taskmaster.cli.worktree import _common

SUMMARY = "Remove stale entries from the worktree registry"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        report = _common.build_manager().sync(repo_root)

        if args.json:
            formatter.json_output(report.to_dict())
            return 0

        if report.changed:
            formatter.text(f"Removed {len(report.removed_entries)} stale registry entries:")
            for worktree_id in report.removed_entries:
                formatter.text(f"  - {worktree_id}")
        else:
            formatter.text("Registry is in sync.")
        for issue in report.issues:
            formatter.text(f"Note: {issue}")
        return 0

    except Exception as e:
        formatter.error(e, error_code="worktree_sync_error")
        return 1
