"""Settings loading: defaults, environment, YAML file."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from kiteconf.core.config.constants import CONFIG_DIR, CONFIG_FILE_NAME, MAX_CONFIG_SIZE
from kiteconf.core.config.env import load_env_file, read_generic_env, read_kiteconf_env
from kiteconf.core.config.models import Settings
from kiteconf.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file with safety checks.

    An empty file is treated as an empty mapping.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed YAML content as dictionary.

    Raises:
        ConfigError: If file cannot be read, is too large, is a directory,
            or YAML is invalid.

    """
    try:
        # Read with size limit to avoid TOCTOU vulnerability
        with path.open("r", encoding="utf-8") as f:
            content = f.read(MAX_CONFIG_SIZE + 1)

        if len(content) > MAX_CONFIG_SIZE:
            raise ConfigError(
                f"Config file {path} exceeds 1MB limit "
                f"(read {len(content):,} bytes before stopping)."
            )

        parsed = yaml.safe_load(content)
        if parsed is None:
            return {}

        if not isinstance(parsed, dict):
            raise ConfigError(
                f"Config file {path} must contain a YAML mapping, got {type(parsed).__name__}."
            )

        return parsed
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except IsADirectoryError as e:
        raise ConfigError(f"{path} is a directory, not a config file.") from e
    except PermissionError as e:
        raise ConfigError(f"Permission denied reading {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def load_settings(
    config_dir: Path | None = None,
    *,
    load_dotenv_file: bool = True,
) -> Settings:
    """Build Settings from every source, applied once at startup.

    Precedence (lowest to highest): built-in defaults, VISUAL/EDITOR/PAGER,
    {config_dir}/config.yaml, KITECONF_* variables. A {config_dir}/.env
    file is loaded first without overriding the real environment.

    Args:
        config_dir: Directory holding config.yaml and .env.
            Defaults to ~/.config/kiteconf.
        load_dotenv_file: Whether to load {config_dir}/.env.

    Returns:
        Frozen Settings instance.

    Raises:
        ConfigError: If a source is unreadable or a value is invalid.

    """
    resolved_dir = config_dir if config_dir is not None else CONFIG_DIR

    if load_dotenv_file:
        load_env_file(resolved_dir)

    data: dict[str, Any] = dict(read_generic_env())

    config_file = resolved_dir / CONFIG_FILE_NAME
    if config_file.exists():
        logger.debug("Loading settings from %s", config_file)
        data.update(_load_yaml_file(config_file))

    data.update(read_kiteconf_env())

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid kiteconf settings: {e}") from e

    logger.debug(
        "Settings: editor=%s pager=%s differ=%s delay=%ds service=%s",
        settings.editor,
        settings.pager,
        settings.differ,
        settings.restart_delay,
        settings.service_binary,
    )
    return settings
