"""Subprocess helpers with config-driven timeouts and command wrappers.

This module provides safe subprocess execution with:
- Config-driven timeout management (``timeouts.*_seconds``; ``null`` disables)
- A git command wrapper
- No shell=True (security)
"""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from typing import Any, MutableMapping, Optional, Sequence

logger = logging.getLogger(__name__)


def _flatten_cmd(cmd: Any) -> Sequence[str]:
    if isinstance(cmd, (list, tuple)):
        return [str(p) for p in cmd]
    return shlex.split(str(cmd))


def _infer_timeout_type(cmd: Any) -> str:
    parts = _flatten_cmd(cmd)
    if parts and Path(parts[0]).name.lower() == "git":
        return "git_operations"
    return "default"


def _popen_process_group_kwargs() -> dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    if os.name == "nt":
        creationflags = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", None)
        if isinstance(creationflags, int):
            return {"creationflags": creationflags}
    return {}


def _terminate_process_group(proc: subprocess.Popen[Any]) -> None:
    if proc.poll() is not None:
        return
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except OSError:
            proc.terminate()
        try:
            proc.wait(timeout=0.2)
        except subprocess.TimeoutExpired:
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except OSError:
                proc.kill()
        return
    proc.kill()


def _run_capture_output_nohang(cmd: Any, *, timeout: float, **kwargs: Any) -> subprocess.CompletedProcess:
    """Run with captured output, killing the whole process group on timeout.

    ``subprocess.run`` can hang past its timeout when a grandchild keeps the
    output pipes open; terminating the group avoids that.
    """
    argv = list(_flatten_cmd(cmd))
    input_value = kwargs.pop("input", None)
    cwd = kwargs.pop("cwd", None)
    env = kwargs.pop("env", None)
    text = bool(kwargs.pop("text", True))
    check = bool(kwargs.pop("check", False))
    kwargs.pop("capture_output", None)

    proc = subprocess.Popen(
        argv,
        cwd=cwd,
        env=env,
        stdin=subprocess.PIPE if input_value is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=text,
        **_popen_process_group_kwargs(),
    )
    try:
        stdout, stderr = proc.communicate(input=input_value, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _terminate_process_group(proc)
        try:
            stdout, stderr = proc.communicate(timeout=0.2)
        except subprocess.TimeoutExpired:
            stdout = getattr(exc, "output", None)
            stderr = getattr(exc, "stderr", None)
        raise subprocess.TimeoutExpired(argv, timeout, output=stdout, stderr=stderr) from None

    completed = subprocess.CompletedProcess(
        argv,
        proc.returncode if proc.returncode is not None else 0,
        stdout=stdout,
        stderr=stderr,
    )
    if check and completed.returncode != 0:
        raise subprocess.CalledProcessError(
            completed.returncode,
            argv,
            output=stdout,
            stderr=stderr,
        )
    return completed


def configured_timeout(
    cmd: Any, timeout_type: str | None = None, cwd: Path | str | None = None
) -> Optional[float]:
    """Get the configured timeout for a command.

    Args:
        cmd: Command to get timeout for
        timeout_type: Explicit timeout type (e.g., 'git_operations')
        cwd: Working directory, used to locate the project configuration

    Returns:
        Timeout in seconds, or None when timeouts are disabled.
    """
    from taskmaster.core.config.domains.timeouts import TimeoutsConfig

    repo_root: Path | None = None
    if cwd is not None:
        repo_root = Path(cwd).resolve()

    try:
        timeouts = TimeoutsConfig(repo_root=repo_root)
    except Exception as exc:
        # Subprocess helpers must work before a project config exists.
        logger.debug("Timeout configuration unavailable for %s: %s", cwd, exc)
        return None

    return timeouts.seconds_for(timeout_type or _infer_timeout_type(cmd))


def run_with_timeout(cmd, timeout_type: str | None = None, **kwargs):
    """Run a subprocess using the configured timeout bucket.

    Args:
        cmd: Command list/str passed through to ``subprocess.run``.
        timeout_type: Key inside ``timeouts`` without the ``_seconds`` suffix
            (e.g., ``git_operations``).
        **kwargs: Additional arguments forwarded to ``subprocess.run``.

    Returns:
        CompletedProcess from ``subprocess.run``.

    Raises:
        subprocess.TimeoutExpired: When the command exceeds its configured timeout.
    """
    explicit_timeout = kwargs.pop("timeout", None)
    timeout = explicit_timeout if explicit_timeout is not None else configured_timeout(
        cmd, timeout_type=timeout_type, cwd=kwargs.get("cwd")
    )

    logger.debug("exec: %s (cwd=%s)", " ".join(_flatten_cmd(cmd)), kwargs.get("cwd"))

    capture_output = bool(kwargs.get("capture_output", False))
    if capture_output and timeout is not None and "stdout" not in kwargs and "stderr" not in kwargs:
        return _run_capture_output_nohang(cmd, timeout=float(timeout), **kwargs)
    return subprocess.run(cmd, timeout=timeout, **kwargs)


def _to_cwd(cwd: Optional[Path | str]) -> Optional[str]:
    """Convert Path or str cwd to str for subprocess."""
    if cwd is None:
        return None
    return str(cwd)


def run_git_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path | str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    timeout: Optional[float] = None,
    check: bool = False,
) -> subprocess.CompletedProcess:
    """Run a git command with captured text output and the git timeout bucket.

    ``cmd`` must include the leading ``git``.
    """
    return run_with_timeout(
        list(cmd),
        timeout_type="git_operations",
        cwd=_to_cwd(cwd),
        env=env,
        timeout=timeout,
        capture_output=True,
        text=True,
        check=check,
    )


__all__ = [
    "configured_timeout",
    "run_with_timeout",
    "run_git_command",
]
