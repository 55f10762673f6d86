"""Simulated players and their memory."""

from .player import Agent, STRATEGIES
from .memory import PlayerMemory

__all__ = ["Agent", "STRATEGIES", "PlayerMemory"]
