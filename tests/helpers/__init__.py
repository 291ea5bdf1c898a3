"""Test helper modules for the taskmaster test suite.

- git_helpers: real git repository setup (init, commit, branches)
- fake_vcs: in-memory VcsClient for orchestration tests
- io_utils: writing project config files
"""
from __future__ import annotations
