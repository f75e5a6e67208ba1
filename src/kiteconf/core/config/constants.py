"""Shared constants for configuration modules."""

from pathlib import Path

# kiteconf's own settings
CONFIG_DIR: Path = Path.home() / ".config" / "kiteconf"
CONFIG_FILE_NAME: str = "config.yaml"
MAX_CONFIG_SIZE: int = 1_048_576  # 1MB - protection against YAML bombs

# PageKite locations
SHARED_CONFIG_DIR: Path = Path("/etc/pagekite.d")
DEFAULT_TARGET: Path = Path.home() / ".pagekite.rc"

# Hidden history repository created next to a privately edited file
HISTORY_DIR_NAME: str = ".kiteconf"

# Tried in order; the first command that exits 0 ends the chain
DEFAULT_RESTART_COMMANDS: tuple[str, ...] = (
    "systemctl restart pagekite",
    "service pagekite restart",
    "/etc/init.d/pagekite restart",
)
