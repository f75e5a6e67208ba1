"""Scratch directory for the session's settings snapshots."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from kiteconf.session.signals import exit_on_signals

logger = logging.getLogger(__name__)


@contextmanager
def session_workspace() -> Generator[Path, None, None]:
    """Yield a private temp directory removed on every exit path.

    Termination signals are converted to SystemExit for the lifetime of
    the block, so the directory is removed even when the session is
    killed or its terminal hangs up.
    """
    with exit_on_signals(), tempfile.TemporaryDirectory(prefix="kiteconf-") as tmp:
        workdir = Path(tmp)
        logger.debug("Session workspace: %s", workdir)
        yield workdir
