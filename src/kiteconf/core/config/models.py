"""Settings model for kiteconf."""

import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kiteconf.core.config.constants import (
    DEFAULT_RESTART_COMMANDS,
    DEFAULT_TARGET,
    SHARED_CONFIG_DIR,
)


class Settings(BaseModel):
    """Resolved kiteconf settings, built once at startup.

    The instance is frozen and handed to every component that needs it,
    so nothing downstream reads the environment directly.

    Attributes:
        editor: Editor command line; the target path is appended.
        pager: Pager command line; text is fed on stdin.
        differ: Line-diff command line; two file paths are appended.
        restart_delay: Seconds to wait before a scheduled restart.
        service_binary: PageKite executable used for validation.
        restart_commands: Restart commands, tried in order.
        shared_config_dir: The system-wide fragment directory.
        default_target: File edited when no path is given.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    editor: str = Field(default="vi", min_length=1)
    pager: str = Field(default="less", min_length=1)
    differ: str = Field(default="diff -u", min_length=1)
    restart_delay: int = Field(default=5, ge=0, le=3600)
    service_binary: str = Field(default="pagekite", min_length=1)
    restart_commands: tuple[str, ...] = Field(default=DEFAULT_RESTART_COMMANDS, min_length=1)
    shared_config_dir: Path = SHARED_CONFIG_DIR
    default_target: Path = DEFAULT_TARGET

    @field_validator("editor", "pager", "differ", "service_binary")
    @classmethod
    def _must_split(cls, value: str) -> str:
        try:
            parts = shlex.split(value)
        except ValueError as e:
            raise ValueError(f"cannot parse command line {value!r}: {e}") from e
        if not parts:
            raise ValueError("command line is empty")
        return value

    @field_validator("restart_commands")
    @classmethod
    def _no_blank_commands(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(cmd.strip() for cmd in value)
        if any(not cmd for cmd in cleaned):
            raise ValueError("restart commands must not be empty")
        return cleaned

    @property
    def editor_argv(self) -> list[str]:
        return shlex.split(self.editor)

    @property
    def pager_argv(self) -> list[str]:
        return shlex.split(self.pager)

    @property
    def differ_argv(self) -> list[str]:
        return shlex.split(self.differ)

    @property
    def service_argv(self) -> list[str]:
        return shlex.split(self.service_binary)

    def required_programs(self) -> dict[str, str]:
        """Map each external program to what it is used for."""
        return {
            "git": "history repository",
            self.differ_argv[0]: "diff tool",
            self.pager_argv[0]: "pager",
            self.editor_argv[0]: "editor",
            self.service_argv[0]: "PageKite binary",
        }
