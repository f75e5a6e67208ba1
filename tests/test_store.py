"""Tests for the git-backed checkpoint store."""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from kiteconf.core.exceptions import MissingDependencyError, RepositoryError
from kiteconf.store import VersionStore, commit_message, diff_dumps

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _commit_count(root: Path) -> int:
    result = subprocess.run(
        ["git", "rev-list", "--count", "HEAD"],
        cwd=root,
        capture_output=True,
        text=True,
    )
    return int(result.stdout.strip()) if result.returncode == 0 else 0


@pytest.fixture
def live_file(tmp_path: Path) -> Path:
    rc = tmp_path / "pagekite.rc"
    rc.write_text("kitename = a.example.com\n")
    return rc


@pytest.fixture
def private_store(tmp_path: Path) -> VersionStore:
    store = VersionStore(tmp_path / ".kiteconf")
    store.ensure_initialized()
    return store


class TestEnsureInitialized:
    """Tests for VersionStore.ensure_initialized()."""

    def test_creates_directory_and_repository(self, tmp_path: Path) -> None:
        store = VersionStore(tmp_path / "nested" / ".kiteconf")
        store.ensure_initialized()
        assert (tmp_path / "nested" / ".kiteconf" / ".git").is_dir()

    def test_is_idempotent(self, tmp_path: Path) -> None:
        store = VersionStore(tmp_path / ".kiteconf")
        store.ensure_initialized()
        store.ensure_initialized()
        assert store.is_initialized()

    def test_unwritable_location_is_repository_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = VersionStore(blocker / ".kiteconf")
        with pytest.raises(RepositoryError):
            store.ensure_initialized()

    def test_failed_git_init_is_repository_error(self, tmp_path: Path) -> None:
        store = VersionStore(tmp_path / ".kiteconf")
        with patch("kiteconf.store._run_git", return_value=(128, "", "fatal: nope")):
            with pytest.raises(RepositoryError, match="fatal: nope"):
                store.ensure_initialized()

    def test_missing_git_is_missing_dependency(self, tmp_path: Path) -> None:
        store = VersionStore(tmp_path / ".kiteconf")
        with patch("kiteconf.store.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(MissingDependencyError, match="git"):
                store.ensure_initialized()


class TestCheckpoint:
    """Tests for VersionStore.checkpoint()."""

    def test_private_mode_copies_and_commits(
        self, private_store: VersionStore, live_file: Path
    ) -> None:
        assert private_store.checkpoint(live_file) is True
        assert (private_store.root / live_file.name).read_text() == live_file.read_text()
        assert _commit_count(private_store.root) == 1

    def test_unchanged_file_is_not_recommitted(
        self, private_store: VersionStore, live_file: Path
    ) -> None:
        private_store.checkpoint(live_file)
        assert private_store.checkpoint(live_file) is False
        assert _commit_count(private_store.root) == 1

    def test_changed_file_adds_commit(self, private_store: VersionStore, live_file: Path) -> None:
        private_store.checkpoint(live_file)
        live_file.write_text("kitename = b.example.com\n")
        assert private_store.checkpoint(live_file) is True
        assert _commit_count(private_store.root) == 2

    def test_commit_uses_fixed_message(self, private_store: VersionStore, live_file: Path) -> None:
        private_store.checkpoint(live_file)
        [entry] = private_store.history(live_file)
        assert entry.message == commit_message(live_file.name)

    def test_shared_mode_commits_in_place(self, tmp_path: Path) -> None:
        shared = tmp_path / "pagekite.d"
        shared.mkdir()
        fragment = shared / "10_account.rc"
        fragment.write_text("kitename = box.example.com\n")
        (shared / "20_other.rc").write_text("defaults\n")
        store = VersionStore(shared)
        store.ensure_initialized()

        assert store.checkpoint(fragment) is True
        assert store.has_checkpoint(fragment)
        # Only the edited fragment is recorded
        assert not store.has_checkpoint(shared / "20_other.rc")


class TestRevert:
    """Tests for VersionStore.revert()."""

    def test_without_checkpoint_is_noop(self, private_store: VersionStore, live_file: Path) -> None:
        live_file.write_text("edited\n")
        assert private_store.revert(live_file) is False
        assert live_file.read_text() == "edited\n"

    def test_without_repository_is_noop(self, tmp_path: Path, live_file: Path) -> None:
        store = VersionStore(tmp_path / "never-created")
        assert store.revert(live_file) is False

    def test_checkpoint_then_revert_is_byte_identical(
        self, private_store: VersionStore, live_file: Path
    ) -> None:
        original = b"kitename = a.example.com\nkitesecret = \xc3\xa9t\xc3\xa9\n"
        live_file.write_bytes(original)
        private_store.checkpoint(live_file)

        assert private_store.revert(live_file) is True
        assert live_file.read_bytes() == original

    def test_discards_edits_after_checkpoint(
        self, private_store: VersionStore, live_file: Path
    ) -> None:
        private_store.checkpoint(live_file)
        live_file.write_text("BROKEN\n")

        assert private_store.revert(live_file) is True
        assert live_file.read_text() == "kitename = a.example.com\n"

    def test_private_revert_ignores_tampered_store_copy(
        self, private_store: VersionStore, live_file: Path
    ) -> None:
        private_store.checkpoint(live_file)
        (private_store.root / live_file.name).write_text("tampered\n")
        live_file.write_text("edited\n")

        private_store.revert(live_file)

        assert live_file.read_text() == "kitename = a.example.com\n"

    def test_shared_revert_checks_out_in_place(self, tmp_path: Path) -> None:
        shared = tmp_path / "pagekite.d"
        shared.mkdir()
        fragment = shared / "10_account.rc"
        fragment.write_text("kitename = box.example.com\n")
        store = VersionStore(shared)
        store.ensure_initialized()
        store.checkpoint(fragment)
        fragment.write_text("kitename = oops\n")

        assert store.revert(fragment) is True
        assert fragment.read_text() == "kitename = box.example.com\n"


class TestHistory:
    """Tests for VersionStore.history()."""

    def test_newest_first(self, private_store: VersionStore, live_file: Path) -> None:
        private_store.checkpoint(live_file)
        live_file.write_text("kitename = b.example.com\n")
        private_store.checkpoint(live_file)

        entries = private_store.history(live_file)

        assert len(entries) == 2
        assert entries[0].revision != entries[1].revision

    def test_empty_without_repository(self, tmp_path: Path, live_file: Path) -> None:
        assert VersionStore(tmp_path / "none").history(live_file) == []


class TestDiffDumps:
    """Tests for diff_dumps()."""

    def test_shows_changed_lines(self, tmp_path: Path) -> None:
        output = diff_dumps("a\nb\n", "a\nc\n", ["diff", "-u"], tmp_path)
        assert "-b" in output
        assert "+c" in output

    def test_identical_is_empty(self, tmp_path: Path) -> None:
        assert diff_dumps("a\n", "a\n", ["diff", "-u"], tmp_path) == ""

    def test_missing_tool_raises(self, tmp_path: Path) -> None:
        with pytest.raises(MissingDependencyError, match="no-such-diff"):
            diff_dumps("a\n", "b\n", ["no-such-diff"], tmp_path)
