"""Exception hierarchy for kiteconf.

Every fatal condition raised during a session derives from KiteconfError
and carries the process exit code the CLI reports for it. Recoverable
conditions (a post-edit parse failure, sensitive drift) are values handled
inside the edit loop and never raised.
"""


class KiteconfError(Exception):
    """Base exception for all kiteconf errors."""

    exit_code: int = 1


class ConfigError(KiteconfError):
    """kiteconf's own settings (YAML file, environment) are invalid."""

    exit_code = 6


class MissingDependencyError(KiteconfError):
    """A required external program could not be found.

    Attributes:
        tool: Name of the program that was looked up.

    """

    exit_code = 3

    def __init__(self, tool: str, purpose: str | None = None) -> None:
        self.tool = tool
        self.purpose = purpose
        detail = f" ({purpose})" if purpose else ""
        super().__init__(f"Required program not found: {tool}{detail}")


class BaselineParseError(KiteconfError):
    """The configuration was already broken before editing started."""

    exit_code = 4

    def __init__(self, source: str, diagnostics: str) -> None:
        self.source = source
        self.diagnostics = diagnostics
        super().__init__(
            f"Refusing to edit {source}: the current configuration does not parse"
        )


class RepositoryError(KiteconfError):
    """The history repository could not be created or written."""

    exit_code = 5
