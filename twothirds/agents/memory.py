"""Player memory: the secret behind a commitment and past rounds."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel


class CommitmentSecret(BaseModel):
    """What a player must keep to open their commitment later."""
    game_id: int
    guess: int
    salt: bytes
    commitment: bytes


class RoundRecord(BaseModel):
    """A finished round as seen by one player."""
    game_id: int
    guess: Optional[int] = None  # None if the player did not reveal
    average: int
    target: int
    winner: str
    won: bool
    forfeited: bool = False  # Nobody revealed


@dataclass
class PlayerMemory:
    """Manages a player's secrets and round history.

    Players only know what was public once a round ended, plus their own
    guess and salt.
    """

    name: str
    secret: Optional[CommitmentSecret] = None
    history: list[RoundRecord] = field(default_factory=list)
    max_recent_rounds: int = 10

    def remember_commitment(self, game_id: int, guess: int, salt: bytes, commitment: bytes) -> None:
        """Keep the guess and salt until reveal time."""
        self.secret = CommitmentSecret(
            game_id=game_id,
            guess=guess,
            salt=salt,
            commitment=commitment,
        )

    def secret_for(self, game_id: int) -> Optional[CommitmentSecret]:
        if self.secret and self.secret.game_id == game_id:
            return self.secret
        return None

    def record_round(
        self,
        game_id: int,
        average: int,
        target: int,
        winner: str,
        guess: Optional[int] = None,
        forfeited: bool = False,
    ) -> RoundRecord:
        """Add a finished round and drop the secret that belonged to it."""
        record = RoundRecord(
            game_id=game_id,
            guess=guess,
            average=average,
            target=target,
            winner=winner,
            won=winner == self.name and not forfeited,
            forfeited=forfeited,
        )
        self.history.append(record)
        if self.secret_for(game_id):
            self.secret = None
        return record

    def past_targets(self) -> list[int]:
        """Targets of recent rounds that had at least one reveal."""
        recent = self.history[-self.max_recent_rounds:]
        return [r.target for r in recent if not r.forfeited]

    def get_context(self, player_count: int) -> str:
        """Build context string for the LLM.

        Args:
            player_count: How many players are in the current round.

        Returns:
            Formatted context string.
        """
        lines = [
            f"YOU ARE: {self.name}",
            f"PLAYERS THIS ROUND: {player_count}",
            "",
        ]

        recent = self.history[-self.max_recent_rounds:]
        if recent:
            lines.append("PREVIOUS ROUNDS:")
            for r in recent:
                mine = f"you guessed {r.guess}" if r.guess is not None else "you did not reveal"
                if r.forfeited:
                    outcome = "nobody revealed"
                else:
                    outcome = "you won" if r.won else f"{r.winner} won"
                lines.append(
                    f"  - Game {r.game_id}: average {r.average}, target {r.target}, "
                    f"{mine}, {outcome}"
                )
        else:
            lines.append("This is the first round you play.")

        return "\n".join(lines)
