import threading


class Signal:
    """On/off flag shared between the agent loop and the spinner thread."""

    def __init__(self):
        self._event = threading.Event()

    def on(self) -> None:
        self._event.set()

    def off(self) -> None:
        self._event.clear()

    def is_on(self) -> bool:
        return self._event.is_set()

    def __repr__(self):
        return f"Signal({'on' if self.is_on() else 'off'})"
