"""Clocks returning the current time in whole seconds."""

import time


def system_clock() -> int:
    """Wall-clock time in seconds since the epoch."""
    return int(time.time())


class ManualClock:
    """A clock that only moves when told to.

    Used by the simulation and the tests to step a game through its phases
    without waiting.
    """

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        """Move the clock forward.

        Args:
            seconds: How far to move. Must not be negative.

        Returns:
            The new time.
        """
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self.now += seconds
        return self.now

    def set(self, timestamp: int) -> int:
        """Jump to an absolute time (never backwards)."""
        return self.advance(timestamp - self.now)
