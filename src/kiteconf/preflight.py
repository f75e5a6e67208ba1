"""Target resolution, privilege escalation and dependency checks.

Everything here runs before the first file is touched. A shared target
(the system fragment directory) is edited only as root: an unprivileged
invocation replaces itself with ``sudo kiteconf ...`` rather than carrying
on with partial rights.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from kiteconf.core.config import HISTORY_DIR_NAME, Settings, preserved_env_names
from kiteconf.core.exceptions import MissingDependencyError

logger = logging.getLogger(__name__)

# Set on the re-executed process so a failed escalation cannot loop
ESCALATED_ENV = "KITECONF_ESCALATED"


@dataclass(frozen=True)
class ConfigTarget:
    """The file being edited and where its history lives.

    Attributes:
        path: Absolute path of the edited file (directory part resolved).
        is_shared: True if the file lives in the shared system directory.
        store_root: Repository directory for this target.
        validation_source: What the validator parses: the whole fragment
            directory when shared, the file alone otherwise.

    """

    path: Path
    is_shared: bool
    store_root: Path
    validation_source: Path


def resolve_target(path: Path, shared_dir: Path) -> ConfigTarget:
    """Resolve ``path`` and classify it as shared or private.

    The directory is resolved through symlinks; the file name is kept as
    given so a symlinked file is edited in place.
    """
    expanded = path.expanduser()
    directory = expanded.parent.resolve()
    absolute = directory / expanded.name
    is_shared = directory == shared_dir.resolve()

    if is_shared:
        return ConfigTarget(
            path=absolute,
            is_shared=True,
            store_root=directory,
            validation_source=directory,
        )
    return ConfigTarget(
        path=absolute,
        is_shared=False,
        store_root=directory / HISTORY_DIR_NAME,
        validation_source=absolute,
    )


def is_privileged() -> bool:
    return os.geteuid() == 0


def needs_escalation(target: ConfigTarget) -> bool:
    return target.is_shared and not is_privileged()


def build_escalation_command(argv: Sequence[str]) -> list[str]:
    """Command line that re-runs this session under sudo.

    Args:
        argv: Original arguments, without the program name.

    """
    preserve = ",".join([*preserved_env_names(), ESCALATED_ENV])
    return [
        "sudo",
        f"--preserve-env={preserve}",
        sys.executable,
        "-m",
        "kiteconf",
        *argv,
    ]


def escalate(argv: Sequence[str]) -> None:
    """Replace the current process with a privileged copy of itself.

    Does not return on success.

    Raises:
        MissingDependencyError: If sudo is unavailable.
        PermissionError: If already escalated once and still unprivileged.

    """
    if os.environ.get(ESCALATED_ENV) == "1":
        raise PermissionError("Still not running as root after escalation")
    if shutil.which("sudo") is None:
        raise MissingDependencyError("sudo", "editing the shared configuration")

    cmd = build_escalation_command(argv)
    logger.info("Re-running with elevated privilege: %s", " ".join(cmd))
    os.environ[ESCALATED_ENV] = "1"
    os.execvp(cmd[0], cmd)


def check_dependencies(
    programs: Mapping[str, str],
    which: Callable[[str], str | None] | None = None,
) -> None:
    """Verify every external program resolves on PATH.

    Args:
        programs: Program name to purpose, checked in order.
        which: Lookup function, shutil.which by default.

    Raises:
        MissingDependencyError: On the first program that cannot be found.

    """
    lookup = which if which is not None else shutil.which
    for program, purpose in programs.items():
        location = lookup(program)
        if location is None:
            raise MissingDependencyError(program, purpose)
        logger.debug("Found %s (%s): %s", program, purpose, location)


def preflight(settings: Settings, target: ConfigTarget, argv: Sequence[str]) -> None:
    """Escalate if required, then check dependencies.

    Args:
        settings: Loaded settings.
        target: Resolved target.
        argv: Original CLI arguments, replayed under sudo.

    """
    if needs_escalation(target):
        escalate(argv)
    check_dependencies(settings.required_programs())
