"""Git-backed checkpoint history for edited configuration.

In shared mode the store root is the configuration directory itself, so
the live files are the repository's working tree. In private mode the
store is a hidden directory beside the edited file and receives a copy of
it on every checkpoint.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from kiteconf.core.exceptions import MissingDependencyError, RepositoryError

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 30

# Used only when git has no identity configured (common for root)
FALLBACK_IDENTITY: tuple[str, str] = ("kiteconf", "kiteconf@localhost")


@dataclass(frozen=True)
class CheckpointInfo:
    """One entry of a file's checkpoint history."""

    revision: str
    date: str
    message: str


def _run_git(args: list[str], cwd: Path) -> tuple[int, str, str]:
    """Run a git command and return exit code, stdout, stderr.

    Args:
        args: Git command arguments (without 'git' prefix).
        cwd: Working directory for git command.

    Returns:
        Tuple of (exit_code, stdout, stderr).

    Raises:
        MissingDependencyError: If git is not installed.

    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            stdin=subprocess.DEVNULL,
            timeout=GIT_TIMEOUT,
        )
        return result.returncode, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return 1, "", "Git command timed out"
    except FileNotFoundError as e:
        raise MissingDependencyError("git", "history repository") from e


def commit_message(name: str) -> str:
    """Fixed message recorded for every checkpoint of ``name``."""
    return f"kiteconf: checkpoint {name}"


class VersionStore:
    """Checkpoint, revert and inspect one directory's edit history.

    Args:
        root: Repository directory (``GD``).

    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def __repr__(self) -> str:
        return f"VersionStore(root={self.root!s})"

    def _is_in_place(self, file: Path) -> bool:
        return file.parent.resolve() == self.root.resolve()

    def _relpath(self, file: Path) -> str:
        """Path of ``file`` inside the repository."""
        return file.name

    def is_initialized(self) -> bool:
        return (self.root / ".git").exists()

    def ensure_initialized(self) -> None:
        """Create the root directory and repository if absent.

        Raises:
            RepositoryError: If the directory or repository cannot be created.

        """
        if self.is_initialized():
            return

        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RepositoryError(f"Cannot create history directory {self.root}: {e}") from e

        exit_code, _, stderr = _run_git(["init", "--quiet"], self.root)
        if exit_code != 0 or not self.is_initialized():
            raise RepositoryError(
                f"Cannot initialize history repository in {self.root}: {stderr.strip()}"
            )
        logger.info("Initialized history repository in %s", self.root)

    def has_checkpoint(self, file: Path) -> bool:
        """Check whether HEAD holds a committed version of ``file``."""
        if not self.is_initialized():
            return False
        exit_code, _, _ = _run_git(
            ["rev-parse", "--verify", "--quiet", f"HEAD:{self._relpath(file)}"],
            self.root,
        )
        return exit_code == 0

    def _identity_args(self) -> list[str]:
        exit_code, stdout, _ = _run_git(["config", "user.email"], self.root)
        if exit_code == 0 and stdout.strip():
            return []
        name, email = FALLBACK_IDENTITY
        return ["-c", f"user.name={name}", "-c", f"user.email={email}"]

    def checkpoint(self, file: Path) -> bool:
        """Record the current content of ``file`` as the new baseline.

        Args:
            file: Live configuration file.

        Returns:
            True if a commit was created, False if the content was already
            the latest checkpoint.

        Raises:
            RepositoryError: If copying, staging or committing fails.

        """
        relpath = self._relpath(file)
        if not self._is_in_place(file):
            try:
                shutil.copy2(file, self.root / relpath)
            except OSError as e:
                raise RepositoryError(f"Cannot copy {file} into {self.root}: {e}") from e

        exit_code, _, stderr = _run_git(["add", "--", relpath], self.root)
        if exit_code != 0:
            raise RepositoryError(f"Failed to stage {relpath}: {stderr.strip()}")

        exit_code, _, _ = _run_git(["diff", "--cached", "--quiet", "--", relpath], self.root)
        if exit_code == 0:
            # Nothing to commit is not an error
            logger.info("No changes in %s since the last checkpoint", relpath)
            return False

        message = commit_message(file.name)
        exit_code, stdout, stderr = _run_git(
            [*self._identity_args(), "commit", "--quiet", "-m", message, "--", relpath],
            self.root,
        )
        if exit_code != 0:
            raise RepositoryError(f"Failed to commit {relpath}: {stderr.strip() or stdout.strip()}")

        logger.info("Created checkpoint: %s", message)
        return True

    def revert(self, file: Path) -> bool:
        """Restore ``file`` to its last checkpoint.

        Args:
            file: Live configuration file.

        Returns:
            True if the file was restored, False if there is no checkpoint.

        Raises:
            RepositoryError: If the checkout or copy fails.

        """
        if not self.has_checkpoint(file):
            logger.info("No checkpoint of %s to revert to", file)
            return False

        relpath = self._relpath(file)
        exit_code, _, stderr = _run_git(["checkout", "HEAD", "--", relpath], self.root)
        if exit_code != 0:
            raise RepositoryError(f"Failed to restore {relpath}: {stderr.strip()}")

        if not self._is_in_place(file):
            try:
                shutil.copy2(self.root / relpath, file)
            except OSError as e:
                raise RepositoryError(f"Cannot restore {file} from {self.root}: {e}") from e

        logger.info("Reverted %s to its last checkpoint", file)
        return True

    def history(self, file: Path, limit: int = 10) -> list[CheckpointInfo]:
        """List the most recent checkpoints of ``file``, newest first."""
        if not self.is_initialized():
            return []
        exit_code, stdout, _ = _run_git(
            [
                "log",
                f"--max-count={limit}",
                "--format=%h%x09%ad%x09%s",
                "--date=iso",
                "--",
                self._relpath(file),
            ],
            self.root,
        )
        if exit_code != 0:
            return []

        entries = []
        for line in stdout.splitlines():
            parts = line.split("\t", 2)
            if len(parts) == 3:
                entries.append(CheckpointInfo(revision=parts[0], date=parts[1], message=parts[2]))
        return entries


def diff_dumps(
    before: str,
    after: str,
    differ_argv: list[str],
    workdir: Path,
) -> str:
    """Render a line diff of two settings dumps with the external diff tool.

    Args:
        before: Text captured before editing.
        after: Current text.
        differ_argv: Diff command line; two file paths are appended.
        workdir: Session scratch directory for the two snapshot files.

    Returns:
        The diff tool's output (empty when identical).

    Raises:
        MissingDependencyError: If the diff tool cannot be executed.

    """
    before_path = workdir / "before.settings"
    after_path = workdir / "after.settings"
    before_path.write_text(before, encoding="utf-8")
    after_path.write_text(after, encoding="utf-8")

    try:
        result = subprocess.run(
            [*differ_argv, str(before_path), str(after_path)],
            capture_output=True,
            text=True,
            stdin=subprocess.DEVNULL,
        )
    except FileNotFoundError as e:
        raise MissingDependencyError(differ_argv[0], "diff tool") from e

    # diff(1) exits 1 when the inputs differ
    if result.returncode > 1:
        logger.warning("Diff tool exited with %d: %s", result.returncode, result.stderr.strip())
    return result.stdout or result.stderr
