"""Pytest configuration and fixtures for kiteconf tests."""

import stat
from pathlib import Path

import pytest

from kiteconf.core.config import Settings
from kiteconf.preflight import ConfigTarget, resolve_target

# Stand-in for ``pagekite --clean --optfile=F|--optdir=D --settings``:
# a file containing BROKEN fails to parse, anything else is echoed back
# as the settings dump.
FAKE_PAGEKITE = """\
#!/bin/sh
files=""
for arg in "$@"; do
  case "$arg" in
    --optfile=*) files="${arg#--optfile=}" ;;
    --optdir=*) files="${arg#--optdir=}/*.rc" ;;
  esac
done
if grep -q BROKEN $files; then
  echo "Invalid option on line 1" >&2
  exit 1
fi
cat $files
"""


@pytest.fixture
def fake_pagekite(tmp_path: Path) -> Path:
    """Executable fake PageKite binary."""
    script = tmp_path / "bin" / "pagekite"
    script.parent.mkdir()
    script.write_text(FAKE_PAGEKITE)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def shared_dir(tmp_path: Path) -> Path:
    """Directory standing in for /etc/pagekite.d."""
    directory = tmp_path / "pagekite.d"
    directory.mkdir()
    return directory


@pytest.fixture
def settings(fake_pagekite: Path, shared_dir: Path, tmp_path: Path) -> Settings:
    """Settings pointing at the fake binary and temp locations."""
    return Settings(
        editor="true",
        pager="cat",
        differ="diff -u",
        restart_delay=0,
        service_binary=str(fake_pagekite),
        shared_config_dir=shared_dir,
        default_target=tmp_path / "home" / ".pagekite.rc",
    )


@pytest.fixture
def private_target(tmp_path: Path, shared_dir: Path) -> ConfigTarget:
    """A private config file with a kite name, secret and SSH passthrough."""
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    rc = home / ".pagekite.rc"
    rc.write_text(
        "frontend = fe.example.com:443\n"
        "kitename = alice.example.com\n"
        "kitesecret = s3cret\n"
        "service_on = raw-22:alice.example.com:localhost:22:s3cret\n"
        "service_on = http:alice.example.com:localhost:80:s3cret\n"
    )
    return resolve_target(rc, shared_dir)


@pytest.fixture
def shared_target(shared_dir: Path) -> ConfigTarget:
    """A fragment inside the shared directory."""
    rc = shared_dir / "10_account.rc"
    rc.write_text("kitename = box.example.com\nkitesecret = t0ps3cret\n")
    (shared_dir / "20_frontends.rc").write_text("defaults\n")
    return resolve_target(rc, shared_dir)
