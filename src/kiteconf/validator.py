"""Validation through the PageKite binary.

kiteconf never parses PageKite configuration itself. It asks pagekite to
load the configuration in isolation (``--clean``) and dump the effective
settings (``--settings``). A zero exit status means the configuration
parsed, and the dump is its canonical rendering.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from kiteconf.core.exceptions import MissingDependencyError

logger = logging.getLogger(__name__)

VALIDATE_TIMEOUT = 60


@dataclass(frozen=True)
class NormalizedDump:
    """Canonical settings text produced by a successful parse."""

    text: str

    def lines(self) -> list[str]:
        return self.text.splitlines()


@dataclass(frozen=True)
class ParseFailure:
    """A configuration that the service binary rejected.

    Attributes:
        diagnostics: Combined stdout/stderr of the failed run.
        returncode: Exit status of the failed run.

    """

    diagnostics: str
    returncode: int


ValidationResult = NormalizedDump | ParseFailure


def build_validate_command(service_argv: list[str], source: Path) -> list[str]:
    """Build the settings-dump command line for a file or fragment directory."""
    if source.is_dir():
        return [*service_argv, "--clean", f"--optdir={source}", "--settings"]
    return [*service_argv, "--clean", f"--optfile={source}", "--settings"]


def validate(source: Path, service_argv: list[str]) -> ValidationResult:
    """Parse a configuration and return its canonical dump or the failure.

    Args:
        source: Configuration file, or directory of fragment files.
        service_argv: PageKite command line (e.g. ["pagekite"]).

    Returns:
        NormalizedDump on success, ParseFailure otherwise.

    Raises:
        MissingDependencyError: If the service binary cannot be executed.

    """
    cmd = build_validate_command(service_argv, source)
    logger.debug("Validating %s: %s", source, cmd)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            stdin=subprocess.DEVNULL,
            timeout=VALIDATE_TIMEOUT,
        )
    except FileNotFoundError as e:
        raise MissingDependencyError(service_argv[0], "PageKite binary") from e
    except subprocess.TimeoutExpired:
        logger.warning("Validation of %s timed out after %ds", source, VALIDATE_TIMEOUT)
        return ParseFailure(
            diagnostics=f"{service_argv[0]} did not finish within {VALIDATE_TIMEOUT}s",
            returncode=-1,
        )

    if result.returncode != 0:
        diagnostics = "\n".join(
            part.rstrip() for part in (result.stdout, result.stderr) if part.strip()
        )
        logger.info("Validation of %s failed with exit code %d", source, result.returncode)
        return ParseFailure(diagnostics=diagnostics, returncode=result.returncode)

    return NormalizedDump(text=result.stdout)
