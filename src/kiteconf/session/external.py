"""Foreground external programs: the editor and the pager."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

from kiteconf.core.exceptions import MissingDependencyError
from kiteconf.session.signals import ignore_sigint

logger = logging.getLogger(__name__)


def run_editor(editor_argv: list[str], path: Path) -> int:
    """Open ``path`` in the editor and wait for it to exit.

    Returns:
        The editor's exit status (informational only).

    Raises:
        MissingDependencyError: If the editor cannot be executed.

    """
    cmd = [*editor_argv, str(path)]
    logger.debug("Launching editor: %s", cmd)
    try:
        with ignore_sigint():
            returncode = subprocess.call(cmd)
    except FileNotFoundError as e:
        raise MissingDependencyError(editor_argv[0], "editor") from e

    if returncode != 0:
        logger.warning("Editor exited with status %d", returncode)
    return returncode


def page(text: str, pager_argv: list[str]) -> None:
    """Show ``text`` through the pager, or print it when not on a terminal.

    Raises:
        MissingDependencyError: If the pager cannot be executed.

    """
    if not sys.stdout.isatty():
        sys.stdout.write(text if text.endswith("\n") or not text else text + "\n")
        sys.stdout.flush()
        return

    try:
        with ignore_sigint():
            subprocess.run(pager_argv, input=text, text=True)
    except FileNotFoundError as e:
        raise MissingDependencyError(pager_argv[0], "pager") from e
