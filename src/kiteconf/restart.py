"""Delayed, detached restart of the PageKite service.

The restart runs in its own session so it survives kiteconf exiting (and
the operator's SSH connection dropping). Its outcome is never observed:
once scheduled there is no confirmation and kiteconf offers no way to
cancel it. The returned pid can be signalled by hand.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledRestart:
    """A restart handed off to a detached shell.

    Attributes:
        pid: Process id of the detached shell.
        command: Shell command line it runs.
        delay: Seconds before the first restart command is tried.

    """

    pid: int
    command: str
    delay: int


def build_restart_script(commands: Sequence[str], delay: int) -> str:
    """Build ``sleep N; cmd1 || cmd2 || ...`` for /bin/sh.

    Each command is split and re-quoted so arguments survive intact.
    """
    chain = " || ".join(" ".join(shlex.quote(arg) for arg in shlex.split(cmd)) for cmd in commands)
    return f"sleep {int(delay)}; {chain}"


def schedule_restart(commands: Sequence[str], delay: int) -> ScheduledRestart:
    """Start the restart chain in the background and return immediately.

    Args:
        commands: Restart commands, tried in order until one exits 0.
        delay: Seconds to wait first.

    Returns:
        ScheduledRestart describing the detached process.

    Raises:
        ValueError: If no commands are given.
        OSError: If the shell cannot be started.

    """
    if not commands:
        raise ValueError("at least one restart command is required")

    script = build_restart_script(commands, delay)
    process = subprocess.Popen(
        ["/bin/sh", "-c", script],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        close_fds=True,
        start_new_session=True,  # Outlive the interactive session and its terminal
    )
    logger.info("Scheduled restart in %ds (PID %d): %s", delay, process.pid, script)
    return ScheduledRestart(pid=process.pid, command=script, delay=delay)
