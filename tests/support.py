"""Helpers shared by monitor, coordinator and CLI tests."""

import threading
from collections.abc import Iterable
from pathlib import Path


class ScriptedProbe:
    """Probe that replays a list of outcomes, repeating the last one forever.

    ``wait_for_calls(n)`` blocks until the probe has been called n times so
    tests can stop a monitor after a known number of cycles.
    """

    def __init__(self, outcomes: Iterable[bool], delay: float = 0.0) -> None:
        self._outcomes = list(outcomes)
        self._delay = delay
        self._changed = threading.Condition()
        self.calls = 0
        self.addresses: list[str] = []

    def __call__(self, address: str) -> bool:
        if self._delay:
            threading.Event().wait(self._delay)
        with self._changed:
            index = min(self.calls, len(self._outcomes) - 1)
            self.calls += 1
            self.addresses.append(address)
            self._changed.notify_all()
            return self._outcomes[index]

    def wait_for_calls(self, count: int, timeout: float = 5.0) -> bool:
        with self._changed:
            return self._changed.wait_for(lambda: self.calls >= count, timeout=timeout)


def read_messages(path: Path) -> list[str]:
    """Return the messages of a log file without their timestamps."""
    return [line.split("] ", 1)[1] for line in path.read_text().splitlines()]
