"""Simulated participants for the 2/3-of-the-average game."""

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..engine.commitment import MAX_GUESS, MIN_GUESS, compute_commitment, new_salt
from ..llm.openrouter import OpenRouterClient
from .memory import PlayerMemory
from .prompts import GUESS_PROMPT, build_system_prompt, generate_personality

if TYPE_CHECKING:
    from ..engine.game import Game, GameResult

STRATEGIES = ("random", "level_k", "llm")


@dataclass
class Agent:
    """A player that picks a number, commits to it and reveals it later.

    Strategies:
        random: uniform over 0..1000.
        level_k: start from 500 (or the mean of past targets) and take
            two thirds ``depth`` times.
        llm: ask a model through OpenRouter, falling back to level_k when
            the answer has no usable number.
    """

    name: str
    strategy: str = "level_k"
    depth: int = 2
    model: str = "anthropic/claude-sonnet-4"
    llm_client: Optional[OpenRouterClient] = None
    reveals: bool = True
    rng: random.Random = field(default_factory=random.Random)
    personality_traits: list[str] = field(default_factory=list)
    memory: PlayerMemory = field(default=None)
    system_prompt: str = ""

    def __post_init__(self):
        """Validate the strategy and set up memory."""
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy: {self.strategy}. Available: {list(STRATEGIES)}")
        if self.strategy == "llm" and self.llm_client is None:
            raise ValueError(f"{self.name} uses the llm strategy but has no llm_client")
        if self.memory is None:
            self.memory = PlayerMemory(name=self.name)
        if self.strategy == "llm":
            if not self.personality_traits:
                self.personality_traits = generate_personality(self.rng)
            self.system_prompt = build_system_prompt(self.name, self.personality_traits)

    def level_k_guess(self) -> int:
        anchor = self.memory.past_targets()
        guess = sum(anchor) // len(anchor) if anchor else 500
        for _ in range(self.depth):
            guess = guess * 2 // 3
        return max(MIN_GUESS, min(MAX_GUESS, guess))

    async def choose_guess(self, player_count: int) -> int:
        """Pick a number for the coming round."""
        if self.strategy == "random":
            return self.rng.randint(MIN_GUESS, MAX_GUESS)
        if self.strategy == "llm":
            prompt = GUESS_PROMPT.format(context=self.memory.get_context(player_count))
            guess = await self.llm_client.ask_guess(self.system_prompt, prompt, self.model)
            if guess is not None:
                return guess
        return self.level_k_guess()

    async def prepare_commitment(self, game_id: int, player_count: int) -> bytes:
        """Choose a guess, salt it, and remember both for the reveal.

        Returns:
            The commitment to submit.
        """
        guess = await self.choose_guess(player_count)
        salt = new_salt()
        commitment = compute_commitment(guess, salt)
        self.memory.remember_commitment(game_id, guess, salt, commitment)
        return commitment

    def reveal(self, game: "Game") -> bool:
        """Open this player's commitment in the given game.

        Returns:
            True if a reveal was submitted, False if the player abstained or
            has nothing to reveal.
        """
        secret = self.memory.secret_for(game.game_id)
        if not self.reveals or secret is None:
            return False
        game.reveal(self.name, secret.guess, secret.salt)
        return True

    def observe_result(self, game: "Game", result: "GameResult") -> None:
        """Record a finished round."""
        player = game.get_player(self.name)
        guess = player.revealed_guess if player and player.has_revealed else None
        self.memory.record_round(
            game.game_id,
            average=result.average,
            target=result.target,
            winner=result.winner,
            guess=guess,
            forfeited=result.revealed_count == 0,
        )
