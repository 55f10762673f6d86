"""Game phase definitions and derivation from time."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .config import GameConfig


class GamePhase(Enum):
    """Phases of a game, in the only order they can occur."""
    WAITING_FOR_PLAYERS = auto()  # Below quorum, players may join and leave
    GAME_STARTING = auto()        # Quorum reached, late joiners still welcome
    COMMIT = auto()               # Players submit their commitments
    REVEAL = auto()               # Players open their commitments
    EVALUATING = auto()           # Reveal window over, waiting for finalize()
    ENDED = auto()                # Results computed, funds credited

    @property
    def label(self) -> str:
        """Human-readable phase name."""
        return self.name.replace("_", " ").title()


@dataclass(frozen=True)
class PhaseSchedule:
    """Boundaries of the timed phases, fixed once quorum is reached."""
    commit_start: int
    commit_end: int
    reveal_end: int

    @classmethod
    def from_quorum(cls, quorum_reached_at: int, config: GameConfig) -> "PhaseSchedule":
        """Lay out the windows that follow the quorum timestamp."""
        commit_start = quorum_reached_at + config.auto_start_delay
        commit_end = commit_start + config.commit_duration
        return cls(
            commit_start=commit_start,
            commit_end=commit_end,
            reveal_end=commit_end + config.reveal_duration,
        )

    def phase_at(self, now: int) -> GamePhase:
        """The timed phase in effect at ``now``."""
        if now < self.commit_start:
            return GamePhase.GAME_STARTING
        if now < self.commit_end:
            return GamePhase.COMMIT
        if now < self.reveal_end:
            return GamePhase.REVEAL
        return GamePhase.EVALUATING

    def deadline(self, phase: GamePhase) -> int:
        """When the given timed phase closes, or 0 for untimed phases."""
        return {
            GamePhase.GAME_STARTING: self.commit_start,
            GamePhase.COMMIT: self.commit_end,
            GamePhase.REVEAL: self.reveal_end,
        }.get(phase, 0)


def derive_phase(
    ended: bool,
    player_count: int,
    min_players: int,
    schedule: Optional[PhaseSchedule],
    now: int,
) -> GamePhase:
    """Work out the current phase. Pure, no side effects.

    Args:
        ended: Whether the terminal latch is set.
        player_count: Current roster size.
        min_players: Quorum size.
        schedule: Windows computed at quorum, None before quorum.
        now: Current time in seconds.

    Returns:
        The phase in effect.
    """
    if ended:
        return GamePhase.ENDED
    if player_count < min_players or schedule is None:
        return GamePhase.WAITING_FOR_PLAYERS
    return schedule.phase_at(now)
