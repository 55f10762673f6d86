"""Fund custody collaborator.

The game never moves money by itself. Stakes are handed to a ledger on
join, and funds only leave through withdraw(), which the recipient calls.
"""

import threading
from collections import defaultdict
from typing import Protocol


class Ledger(Protocol):
    """What a game needs from whoever holds the funds."""

    def deposit(self, identity: str, amount: int) -> None:
        """Take custody of an exact stake from a caller."""
        ...

    def transfer(self, identity: str, amount: int) -> None:
        """Pay an amount out to a caller. Raises if the payout fails."""
        ...


class InMemoryLedger:
    """A ledger that keeps balances in dictionaries.

    Good enough for simulations and tests. Every game created by one
    registry can share the same instance.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.custody = 0
        self.deposited: dict[str, int] = defaultdict(int)
        self.paid_out: dict[str, int] = defaultdict(int)

    def deposit(self, identity: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("deposit amount must be non-negative")
        with self._lock:
            self.custody += amount
            self.deposited[identity] += amount

    def transfer(self, identity: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("transfer amount must be positive")
        with self._lock:
            if amount > self.custody:
                raise RuntimeError(
                    f"ledger holds {self.custody}, cannot pay {amount} to {identity}"
                )
            self.custody -= amount
            self.paid_out[identity] += amount

    def net(self, identity: str) -> int:
        """What an identity has received minus what it has staked."""
        with self._lock:
            return self.paid_out[identity] - self.deposited[identity]
