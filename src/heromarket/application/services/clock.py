import time
from typing import Callable


Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in whole epoch seconds."""
    return int(time.time())


class FrozenClock:
    """Manually advanced clock for tests and replays."""

    def __init__(self, start: int = 0) -> None:
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += int(seconds)
        return self.now
