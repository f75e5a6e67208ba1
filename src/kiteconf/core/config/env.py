"""Environment variable handling for kiteconf."""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# .env file name constant
ENV_FILE_NAME: str = ".env"

# Generic variables shared with other programs. A kiteconf config file
# takes precedence over these.
GENERIC_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "editor": ("VISUAL", "EDITOR"),
    "pager": ("PAGER",),
}

# kiteconf-specific variables. These take precedence over everything.
KITECONF_ENV_KEYS: dict[str, str] = {
    "editor": "KITECONF_EDITOR",
    "pager": "KITECONF_PAGER",
    "differ": "KITECONF_DIFF",
    "restart_delay": "KITECONF_RESTART_DELAY",
    "service_binary": "KITECONF_SERVICE_BIN",
}


def preserved_env_names() -> list[str]:
    """Return every variable name that influences settings.

    Used to carry the operator's choices across a sudo re-exec.
    """
    names: list[str] = []
    for keys in GENERIC_ENV_KEYS.values():
        names.extend(keys)
    names.extend(KITECONF_ENV_KEYS.values())
    return names


def read_generic_env() -> dict[str, str]:
    """Collect settings from generic variables (first non-empty wins)."""
    values: dict[str, str] = {}
    for field, names in GENERIC_ENV_KEYS.items():
        for name in names:
            value = os.environ.get(name, "").strip()
            if value:
                values[field] = value
                break
    return values


def read_kiteconf_env() -> dict[str, str]:
    """Collect settings from KITECONF_* variables."""
    values: dict[str, str] = {}
    for field, name in KITECONF_ENV_KEYS.items():
        value = os.environ.get(name, "").strip()
        if value:
            values[field] = value
    return values


def _check_env_file_permissions(path: Path) -> None:
    """Check if .env file has secure permissions (600 or 400 on Unix).

    Logs a warning if permissions are too permissive.

    Args:
        path: Path to .env file.

    """
    if sys.platform == "win32":
        return

    try:
        mode = path.stat().st_mode & 0o777
        if mode not in (0o600, 0o400):
            logger.warning(
                ".env file %s has insecure permissions %03o, "
                "expected 600 or 400. Run: chmod 600 %s",
                path,
                mode,
                path,
            )
    except OSError:
        pass  # File may have been deleted between check and stat


def load_env_file(
    config_dir: str | Path,
    *,
    check_permissions: bool = True,
) -> bool:
    """Load environment variables from {config_dir}/.env.

    Does NOT override existing environment variables (override=False).

    Args:
        config_dir: kiteconf configuration directory.
        check_permissions: Whether to check file permissions (default True).

    Returns:
        True if .env file was found and loaded, False otherwise.

    """
    env_file = Path(config_dir).expanduser() / ENV_FILE_NAME

    if not env_file.is_file():
        logger.debug(".env file not found at %s, skipping", env_file)
        return False

    if check_permissions:
        _check_env_file_permissions(env_file)

    load_dotenv(env_file, encoding="utf-8", override=False)
    logger.debug("Loaded environment variables from %s", env_file)

    return True
