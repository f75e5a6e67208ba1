"""Tests for signal handling and the session workspace."""

import os
import signal
import time
from pathlib import Path

import pytest

from kiteconf.session.signals import HANDLED_SIGNALS, exit_on_signals, ignore_sigint
from kiteconf.session.workspace import session_workspace


class TestExitOnSignals:
    """Tests for exit_on_signals()."""

    def test_restores_previous_handlers(self) -> None:
        before = {sig: signal.getsignal(sig) for sig in HANDLED_SIGNALS}
        with exit_on_signals():
            assert signal.getsignal(signal.SIGTERM) is not before[signal.SIGTERM]
        assert {sig: signal.getsignal(sig) for sig in HANDLED_SIGNALS} == before

    def test_sigterm_becomes_system_exit(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            with exit_on_signals():
                os.kill(os.getpid(), signal.SIGTERM)
                time.sleep(1)  # handler runs here at the latest
        assert exc_info.value.code == 128 + signal.SIGTERM


class TestIgnoreSigint:
    """Tests for ignore_sigint()."""

    def test_ignores_then_restores(self) -> None:
        before = signal.getsignal(signal.SIGINT)
        with ignore_sigint():
            assert signal.getsignal(signal.SIGINT) is signal.SIG_IGN
        assert signal.getsignal(signal.SIGINT) is before


class TestSessionWorkspace:
    """Tests for session_workspace()."""

    def test_removed_on_normal_exit(self) -> None:
        with session_workspace() as workdir:
            (workdir / "before.settings").write_text("x")
            saved: Path = workdir
        assert not saved.exists()

    def test_removed_on_exception(self) -> None:
        saved: Path | None = None
        with pytest.raises(RuntimeError):
            with session_workspace() as workdir:
                saved = workdir
                raise RuntimeError("boom")
        assert saved is not None and not saved.exists()

    def test_removed_on_hangup(self) -> None:
        saved: Path | None = None
        with pytest.raises(SystemExit):
            with session_workspace() as workdir:
                saved = workdir
                os.kill(os.getpid(), signal.SIGHUP)
                time.sleep(1)  # handler runs here at the latest
        assert saved is not None and not saved.exists()
