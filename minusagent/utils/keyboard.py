"""
Non-blocking keypress detection used to interrupt a streamed model reply.

On POSIX terminals the keypress is only visible without Enter while the terminal is in
cbreak mode, so callers wrap the streaming loop in `listening()`.
"""
from __future__ import annotations

import os
import sys
from contextlib import contextmanager


def _stdin_is_tty() -> bool:
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def key_pressed() -> bool:
    """Return True (and consume the key) if a key is waiting on stdin."""
    if not _stdin_is_tty():
        return False
    if os.name == "nt":
        import msvcrt  # type: ignore

        if msvcrt.kbhit():
            msvcrt.getwch()
            return True
        return False
    import select

    ready, _, _ = select.select([sys.stdin], [], [], 0)
    if ready:
        sys.stdin.read(1)
        return True
    return False


@contextmanager
def listening():
    """Put a POSIX terminal in cbreak mode for the duration of the block."""
    if os.name == "nt" or not _stdin_is_tty():
        yield
        return
    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
