"""Tests for the detached restart coordinator."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from kiteconf.core.config import DEFAULT_RESTART_COMMANDS
from kiteconf.restart import ScheduledRestart, build_restart_script, schedule_restart


class TestBuildRestartScript:
    """Tests for build_restart_script()."""

    def test_sleep_then_fallback_chain(self) -> None:
        script = build_restart_script(DEFAULT_RESTART_COMMANDS, 5)
        assert script == (
            "sleep 5; systemctl restart pagekite || service pagekite restart"
            " || /etc/init.d/pagekite restart"
        )

    def test_arguments_are_quoted(self) -> None:
        script = build_restart_script(["restart-it 'my service'"], 0)
        assert script == "sleep 0; restart-it 'my service'"

    def test_shell_metacharacters_are_neutralised(self) -> None:
        script = build_restart_script(["echo a;reboot"], 1)
        assert script == "sleep 1; echo 'a;reboot'"


class TestScheduleRestart:
    """Tests for schedule_restart()."""

    def test_spawns_detached_shell(self) -> None:
        process = MagicMock(pid=4242)
        with patch("kiteconf.restart.subprocess.Popen", return_value=process) as mock_popen:
            scheduled = schedule_restart(["systemctl restart pagekite"], 7)

        assert scheduled == ScheduledRestart(
            pid=4242,
            command="sleep 7; systemctl restart pagekite",
            delay=7,
        )
        args, kwargs = mock_popen.call_args
        assert args[0] == ["/bin/sh", "-c", "sleep 7; systemctl restart pagekite"]
        assert kwargs["start_new_session"] is True
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert kwargs["stdout"] is subprocess.DEVNULL

    def test_returns_without_waiting(self) -> None:
        process = MagicMock(pid=1)
        with patch("kiteconf.restart.subprocess.Popen", return_value=process):
            schedule_restart(["true"], 60)
        process.wait.assert_not_called()
        process.communicate.assert_not_called()

    def test_requires_a_command(self) -> None:
        with pytest.raises(ValueError):
            schedule_restart([], 5)
