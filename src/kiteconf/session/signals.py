"""Signal handling that lets session cleanup run.

SIGTERM and SIGHUP (the operator's connection dropping) are turned into
SystemExit so every ``finally`` block and context manager on the stack
unwinds normally. SIGINT keeps Python's default KeyboardInterrupt.
"""

import signal
import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from types import FrameType

__all__ = [
    "HANDLED_SIGNALS",
    "exit_on_signals",
    "ignore_sigint",
]

HANDLED_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGHUP)

_Handler = Callable[[int, FrameType | None], object] | int | None


def _raise_system_exit(signum: int, frame: FrameType | None) -> None:
    """Convert a termination signal into SystemExit(128 + signum)."""
    raise SystemExit(128 + signum)


@contextmanager
def exit_on_signals() -> Generator[None, None, None]:
    """Install SystemExit-raising handlers for the duration of the block.

    Must be entered from the main thread (signal.signal() requirement).
    Previous handlers are restored on exit.

    Raises:
        RuntimeError: If not called from the main thread.

    """
    if threading.current_thread() is not threading.main_thread():
        raise RuntimeError("Signal handlers can only be registered from the main thread.")

    previous: dict[signal.Signals, _Handler] = {}
    for sig in HANDLED_SIGNALS:
        previous[sig] = signal.signal(sig, _raise_system_exit)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


@contextmanager
def ignore_sigint() -> Generator[None, None, None]:
    """Ignore Ctrl+C while a foreground child (the editor) owns the terminal."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)
