"""Drive a game through a full round with simulated players."""

import asyncio

from .agents.player import Agent
from .engine.clock import ManualClock
from .engine.game import Game, GameResult


async def play_round(game: Game, agents: list[Agent], clock: ManualClock) -> GameResult:
    """Play one game from the first join to the final result.

    The clock is stepped to each phase boundary, so the round completes
    instantly whatever the configured durations are.

    Args:
        game: A fresh game using ``clock``.
        agents: Players taking part, at least min_players of them.
        clock: The game's clock.

    Returns:
        The finalized result.
    """
    config = game.config
    if not config.min_players <= len(agents) <= config.max_players:
        raise ValueError(
            f"Player count ({len(agents)}) must be between "
            f"{config.min_players} and {config.max_players}"
        )

    for agent in agents:
        game.join(agent.name, config.entry_fee)

    clock.set(game.schedule.commit_start)
    # Guesses may come from remote models, so pick them concurrently
    commitments = await asyncio.gather(*(
        agent.prepare_commitment(game.game_id, len(agents)) for agent in agents
    ))
    for agent, commitment in zip(agents, commitments):
        game.commit(agent.name, commitment)

    clock.set(game.schedule.commit_end)
    for agent in agents:
        agent.reveal(game)

    clock.set(game.schedule.reveal_end)
    result = game.finalize()

    for agent in agents:
        agent.observe_result(game, result)
    return result
