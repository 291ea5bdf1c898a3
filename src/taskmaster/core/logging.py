"""Stdlib logging setup for the taskmaster CLI.

Library modules only create loggers via ``logging.getLogger(__name__)``; the
CLI entry point is the single place that installs handlers.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from taskmaster.core.utils.io import ensure_directory

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONFIGURED_LOG_PATH: str | None = None
_FILE_HANDLER: logging.Handler | None = None
_NULL_HANDLER_INSTALLED: bool = False


def _level_from_name(name: str) -> int:
    value = getattr(logging, str(name).upper(), None)
    return value if isinstance(value, int) else logging.INFO


def _close_quietly(handler: logging.Handler) -> None:
    try:
        handler.close()
    except (OSError, ValueError):
        pass


def configure_stdlib_logging(*, log_path: Path, level: str = "INFO") -> None:
    """Send stdlib logging to ``log_path`` with no stdout/stderr handler.

    Idempotent per-process: if already configured for the same file, no-op.
    """
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER

    resolved = str(Path(log_path).resolve())
    if _CONFIGURED_LOG_PATH == resolved and _FILE_HANDLER is not None:
        return

    ensure_directory(Path(resolved).parent)

    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    # FileHandler is also a StreamHandler; only drop the console ones.
    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) in (sys.stdout, sys.stderr):
            root.removeHandler(h)
            _close_quietly(h)

    if _FILE_HANDLER is not None:
        root.removeHandler(_FILE_HANDLER)
        _close_quietly(_FILE_HANDLER)
        _FILE_HANDLER = None

    fh = logging.FileHandler(resolved, encoding="utf-8")
    fh.setLevel(_level_from_name(level))
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)

    _FILE_HANDLER = fh
    _CONFIGURED_LOG_PATH = resolved


def suppress_lastresort() -> None:
    """Keep stdlib's implicit ``lastResort`` stderr handler out of CLI output.

    Installs a NullHandler on the root logger when it has no handlers at all.
    """
    global _NULL_HANDLER_INSTALLED

    root = logging.getLogger()
    if root.handlers or _NULL_HANDLER_INSTALLED:
        return
    root.addHandler(logging.NullHandler())
    _NULL_HANDLER_INSTALLED = True


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: remove the handlers installed by this module."""
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER, _NULL_HANDLER_INSTALLED
    root = logging.getLogger()
    for h in list(root.handlers):
        if h is _FILE_HANDLER or (_NULL_HANDLER_INSTALLED and isinstance(h, logging.NullHandler)):
            root.removeHandler(h)
            _close_quietly(h)
    root.setLevel(logging.WARNING)
    _CONFIGURED_LOG_PATH = None
    _FILE_HANDLER = None
    _NULL_HANDLER_INSTALLED = False


__all__ = ["configure_stdlib_logging", "reset_stdlib_logging_for_tests", "suppress_lastresort"]
