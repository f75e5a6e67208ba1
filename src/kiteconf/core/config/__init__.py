"""Settings model and loading for kiteconf.

Usage:
    from kiteconf.core.config import load_settings

    settings = load_settings()
    print(settings.editor_argv)
"""

from kiteconf.core.config.constants import (
    CONFIG_DIR,
    CONFIG_FILE_NAME,
    DEFAULT_RESTART_COMMANDS,
    DEFAULT_TARGET,
    HISTORY_DIR_NAME,
    MAX_CONFIG_SIZE,
    SHARED_CONFIG_DIR,
)
from kiteconf.core.config.env import (
    ENV_FILE_NAME,
    _check_env_file_permissions,
    load_env_file,
    preserved_env_names,
)
from kiteconf.core.config.loaders import _load_yaml_file, load_settings
from kiteconf.core.config.models import Settings

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE_NAME",
    "DEFAULT_RESTART_COMMANDS",
    "DEFAULT_TARGET",
    "ENV_FILE_NAME",
    "HISTORY_DIR_NAME",
    "MAX_CONFIG_SIZE",
    "SHARED_CONFIG_DIR",
    "Settings",
    "_check_env_file_permissions",
    "_load_yaml_file",
    "load_env_file",
    "load_settings",
    "preserved_env_names",
]
