"""Default process runner: spawns the real adb binary.

The runner contract is callback based: ``runner(args, callback)`` and the
runner calls ``callback(error, stdout)`` exactly once.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Callable, Optional, Sequence, Set

from adb_bridge.errors import AdbCommandError

logger = logging.getLogger(__name__)

RunnerCallback = Callable[[Any, Optional[str]], None]
Runner = Callable[[Sequence[str], RunnerCallback], Any]

ADB_PATH_ENV = "ADB_BRIDGE_ADB_PATH"

# Strong references so scheduled runs are not garbage collected mid-flight.
_PENDING: Set["asyncio.Task[None]"] = set()


def default_adb_path() -> str:
    return os.environ.get(ADB_PATH_ENV, "adb")


def _is_client_failure(args: Sequence[str], returncode: int, stderr: str) -> bool:
    if returncode == 0:
        return False
    if not args or "shell" not in args:
        return True
    # adb forwards the remote exit status for shell commands; only treat it as
    # a failure when the adb client itself complained.
    err = stderr.lstrip()
    return err.startswith("error:") or err.startswith("adb: ")


async def run_adb_async(args: Sequence[str], *, adb_path: Optional[str] = None) -> Optional[str]:
    """Run ``adb *args`` and return right-stripped stdout (``None`` if empty)."""

    cmd = [adb_path or default_adb_path(), *[str(a) for a in args]]
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout_b, stderr_b = await proc.communicate()
    stdout = stdout_b.decode("utf-8", errors="replace")
    stderr = stderr_b.decode("utf-8", errors="replace")
    returncode = proc.returncode if proc.returncode is not None else 0
    if _is_client_failure(args, returncode, stderr):
        raise AdbCommandError(cmd, returncode, stdout, stderr)
    return stdout.rstrip() or None


async def _run_and_report(
    args: Sequence[str], callback: RunnerCallback, adb_path: Optional[str]
) -> None:
    try:
        stdout = await run_adb_async(args, adb_path=adb_path)
    except (OSError, AdbCommandError) as e:
        logger.debug("adb %s failed: %s", " ".join(str(a) for a in args), e)
        callback(e, None)
        return
    callback(None, stdout)


def _schedule(
    args: Sequence[str], callback: RunnerCallback, adb_path: Optional[str]
) -> "asyncio.Task[None]":
    task = asyncio.get_running_loop().create_task(_run_and_report(list(args), callback, adb_path))
    _PENDING.add(task)
    task.add_done_callback(_PENDING.discard)
    return task


def run_adb(args: Sequence[str], callback: RunnerCallback) -> "asyncio.Task[None]":
    """Schedule ``adb *args`` on the running loop and report via ``callback``.

    The binary is ``$ADB_BRIDGE_ADB_PATH`` (default ``adb``), resolved per call.
    """

    return _schedule(args, callback, None)


def make_runner(adb_path: str) -> Runner:
    """Return a runner pinned to a specific adb binary."""

    def runner(args: Sequence[str], callback: RunnerCallback) -> "asyncio.Task[None]":
        return _schedule(args, callback, adb_path)

    return runner
