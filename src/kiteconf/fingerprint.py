"""Fingerprints of security-sensitive settings.

A fingerprint is a SHA-256 digest over the lines of a settings dump that
decide who can reach the host: the kite name and secret, and any raw
passthrough of port 22. Comparing the before and after fingerprints
reveals an edit that touched them, even when the rest of the file changed
too.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable, Sequence

from kiteconf.validator import NormalizedDump

SENSITIVE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\s*service_on\s*=\s*raw-22\s*:"),
    re.compile(r"^\s*kitename\s*="),
    re.compile(r"^\s*kitesecret\s*="),
)


def sensitive_lines(dump: NormalizedDump, rules: Iterable[re.Pattern[str]]) -> list[str]:
    """Return the lines matching any rule, in their original order."""
    patterns = tuple(rules)
    return [line for line in dump.lines() if any(p.search(line) for p in patterns)]


def fingerprint(
    dump: NormalizedDump,
    rules: Sequence[re.Pattern[str]] = SENSITIVE_PATTERNS,
) -> str | None:
    """Digest the sensitive lines of a dump.

    Args:
        dump: Normalized settings dump.
        rules: Patterns selecting sensitive lines.

    Returns:
        Hex SHA-256 digest, or None when no line matched.

    """
    matched = sensitive_lines(dump, rules)
    if not matched:
        return None
    return hashlib.sha256("\n".join(matched).encode("utf-8")).hexdigest()
