"""Markdown logger for game events and results."""

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..engine.config import GameConfig
    from ..engine.game import GameResult, Player
    from ..engine.phases import PhaseSchedule

log = logging.getLogger(__name__)


class MarkdownLogger:
    """Writes game events to a markdown file.

    Nothing is written until start_game() has been called, so a game can
    always hold a logger even when no log directory was configured.
    """

    def __init__(self, base_dir: str = "games"):
        """Initialize the logger.

        Args:
            base_dir: Base directory for game logs.
        """
        self.base_dir = Path(base_dir)
        self.game_dir: Optional[Path] = None
        self.game_id: Optional[str] = None

    @property
    def game_file(self) -> Optional[Path]:
        return self.game_dir / "game_state.md" if self.game_dir else None

    def start_game(self, game_id: Optional[str] = None) -> Path:
        """Start logging a new game.

        Args:
            game_id: Optional game identifier. If not provided, uses timestamp.

        Returns:
            Path to the game directory.
        """
        if game_id is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
            game_id = f"game_{timestamp}"

        self.game_id = game_id
        self.game_dir = self.base_dir / game_id
        self.game_dir.mkdir(parents=True, exist_ok=True)

        with open(self.game_file, "w") as f:
            f.write(f"# Two-Thirds Game - {self.game_id}\n\n")
            f.write(f"Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")
            f.write("---\n\n")

        return self.game_dir

    def _append(self, text: str) -> None:
        """Append to the log file.

        A failed write is reported and dropped: the log records game state
        but never decides it.
        """
        if self.game_file is None:
            return
        try:
            with open(self.game_file, "a") as f:
                f.write(text)
        except OSError as e:
            log.warning("could not write to %s: %s", self.game_file, e)

    def log_setup(
        self,
        game_id: int,
        admin: str,
        config: "GameConfig",
        created_by: Optional[str] = None,
    ) -> None:
        """Log the parameters a game was created with."""
        lines = [
            "## Setup\n\n",
            f"Game #{game_id}, administered by **{admin}**",
            f", created by **{created_by}**.\n\n" if created_by else ".\n\n",
            "| Parameter | Value |\n",
            "|-----------|-------|\n",
        ]
        for name, value in config.model_dump().items():
            lines.append(f"| {name} | {value} |\n")
        lines.append("\n## Events\n\n")
        self._append("".join(lines))

    def log_join(self, player: str, player_count: int, max_players: int) -> None:
        self._append(f"- **{player}** joined ({player_count}/{max_players})\n")

    def log_quorum(self, reached_at: int, schedule: "PhaseSchedule") -> None:
        """Log quorum and the resulting commit/reveal windows."""
        self._append(
            f"- Quorum reached at {reached_at}: commit opens {schedule.commit_start}, "
            f"reveal opens {schedule.commit_end}, reveal closes {schedule.reveal_end}\n"
        )

    def log_leave(self, player: str, refund: int) -> None:
        self._append(f"- **{player}** left, {refund} credited back\n")

    def log_commit(self, player: str, commitment: bytes) -> None:
        self._append(f"- **{player}** committed `{commitment.hex()[:16]}...`\n")

    def log_reveal(self, player: str, guess: int) -> None:
        self._append(f"- **{player}** revealed {guess}\n")

    def log_withdrawal(self, player: str, amount: int) -> None:
        self._append(f"- **{player}** withdrew {amount}\n")

    def log_game_end(
        self,
        result: "GameResult",
        players: list["Player"],
        finalized_by: Optional[str] = None,
    ) -> None:
        """Log the game result.

        Args:
            result: Final result.
            players: Every player on the roster.
            finalized_by: Who triggered finalization, if known.
        """
        lines = ["\n---\n\n", "# GAME OVER\n\n"]
        if result.revealed_count == 0:
            lines.append("*Nobody revealed. The pool is forfeited to the administrator.*\n\n")
        else:
            lines.append(f"- Average: {result.average}\n")
            lines.append(f"- Target (2/3 of average): {result.target}\n")
        lines.append(f"- Winner: **{result.winner}** ({result.winner_prize})\n")
        lines.append(f"- Service fee: {result.service_fee}\n")
        lines.append(f"- Prize pool: {result.prize_pool}\n")
        if finalized_by:
            lines.append(f"- Finalized by: {finalized_by}\n")

        lines.append("\n## Players\n\n")
        lines.append("| Player | Committed | Revealed | Guess | Distance |\n")
        lines.append("|--------|-----------|----------|-------|----------|\n")
        for p in players:
            committed = "Yes" if p.has_committed else "No"
            if p.has_revealed:
                distance = abs(p.revealed_guess - result.target)
                lines.append(f"| {p.identity} | {committed} | Yes | {p.revealed_guess} | {distance} |\n")
            else:
                lines.append(f"| {p.identity} | {committed} | No | - | - |\n")

        lines.append(f"\n\nEnded: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")
        self._append("".join(lines))
