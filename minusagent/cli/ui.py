"""
The "thinking" spinner shown while the model works.

The spinner runs on a daemon thread and shares exactly one thing with the agent loop, a
pause Signal. While the signal is on (e.g. during a shell confirmation prompt) the spinner
clears its line and draws nothing.

Usage:
    from minusagent.cli.ui import thinking
    from minusagent.flag import Signal

    pause = Signal()
    with thinking(pause):
        result = session.run("list the files here")
"""
from __future__ import annotations

import shutil
import sys
import threading
import time
from contextlib import contextmanager
from typing import Optional, TextIO

from minusagent.cli.style import styler
from minusagent.flag import Signal

FRAMES = "-\\|/"


class Spinner:
    def __init__(
        self,
        pause: Optional[Signal] = None,
        text: str = "thinking",
        interval: float = 0.08,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.pause = pause or Signal()
        self.text = text
        self.interval = interval
        self.stream = stream or sys.stdout
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._cleared = True

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _clear(self) -> None:
        if self._cleared:
            return
        cols = shutil.get_terminal_size(fallback=(80, 24)).columns
        self.stream.write("\r" + " " * max(0, cols - 1) + "\r")
        self.stream.flush()
        self._cleared = True

    def _spin(self) -> None:
        i = 0
        while not self._stop.is_set():
            if self.pause.is_on():
                self._clear()
            else:
                line = f"{styler.tag('run', 'info')} {self.text} {FRAMES[i % len(FRAMES)]}"
                self.stream.write("\r" + line)
                self.stream.flush()
                self._cleared = False
                i += 1
            self._stop.wait(self.interval)
        self._clear()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop drawing and wait for the thread, so nothing it writes follows our output."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None


@contextmanager
def thinking(pause: Optional[Signal] = None, text: str = "thinking", enabled: Optional[bool] = None):
    if enabled is None:
        enabled = sys.stdout.isatty()
    spinner = Spinner(pause=pause, text=text)
    if enabled:
        spinner.start()
    try:
        yield spinner
    finally:
        spinner.stop()
