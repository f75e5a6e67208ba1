"""Core module for kiteconf: exceptions and configuration."""

from kiteconf.core.exceptions import (
    BaselineParseError,
    ConfigError,
    KiteconfError,
    MissingDependencyError,
    RepositoryError,
)

__all__ = [
    "BaselineParseError",
    "ConfigError",
    "KiteconfError",
    "MissingDependencyError",
    "RepositoryError",
]
