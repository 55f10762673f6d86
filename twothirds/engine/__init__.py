"""Game engine - phases, commit-reveal rules, results and payouts."""

from .config import GameConfig
from .game import Game, GameResult, Player
from .phases import GamePhase
from .registry import GameRegistry

__all__ = ["GameConfig", "Game", "GameResult", "Player", "GamePhase", "GameRegistry"]
