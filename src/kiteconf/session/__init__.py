"""Interactive edit session: state machine, prompts, workspace."""

from kiteconf.session.controller import (
    TRANSITIONS,
    EditSession,
    SessionOutcome,
    SessionState,
    ValidationStatus,
    next_state,
)
from kiteconf.session.workspace import session_workspace

__all__ = [
    "TRANSITIONS",
    "EditSession",
    "SessionOutcome",
    "SessionState",
    "ValidationStatus",
    "next_state",
    "session_workspace",
]
