import asyncio
import random

import pytest

from twothirds.agents.player import Agent
from twothirds.engine.config import GameConfig
from twothirds.engine.registry import GameRegistry
from twothirds.engine.clock import ManualClock
from twothirds.llm.openrouter import parse_guess
from twothirds.main import tie_break_entropy
from twothirds.simulation import play_round

ADMIN = "house"


class FakeLLM:
    """Stands in for OpenRouterClient and records the prompts it gets."""

    def __init__(self, answer):
        self.answer = answer
        self.prompts = []

    async def ask_guess(self, system_prompt, user_prompt, model, temperature=0.7):
        self.prompts.append((system_prompt, user_prompt, model))
        return self.answer


@pytest.fixture
def registry(clock):
    return GameRegistry(admin=ADMIN, defaults=GameConfig(entry_fee=1), clock=clock)


def level_k_agents():
    return [
        Agent(name="Alice", depth=1),
        Agent(name="Bob", depth=2),
        Agent(name="Carol", depth=3),
    ]


def test_level_k_guesses():
    assert Agent(name="a", depth=0).level_k_guess() == 500
    assert Agent(name="a", depth=1).level_k_guess() == 333
    assert Agent(name="a", depth=2).level_k_guess() == 222


def test_play_round_level_k(registry, clock):
    agents = level_k_agents()
    game = registry.create_game(ADMIN)
    result = asyncio.run(play_round(game, agents, clock))

    # 333, 222, 148 -> average 234, target 156
    assert result.average == 234
    assert result.target == 156
    assert result.winner == "Carol"
    assert game.pending_withdrawal("Carol") == 3

    for agent in agents:
        assert agent.memory.secret is None
        record = agent.memory.history[-1]
        assert record.game_id == game.game_id
        assert record.target == 156
    assert agents[2].memory.history[-1].won


def test_history_moves_level_k_anchor(registry, clock):
    agents = level_k_agents()
    asyncio.run(play_round(registry.create_game(ADMIN), agents, clock))
    clock.advance(1_000)
    # anchor is now the previous target (156) instead of 500
    assert agents[0].level_k_guess() == 104


def test_abstaining_agents_do_not_reveal(registry, clock):
    agents = [Agent(name=n, reveals=False) for n in ("a", "b", "c")]
    game = registry.create_game(ADMIN)
    result = asyncio.run(play_round(game, agents, clock))
    assert result.winner == ADMIN
    assert result.revealed_count == 0
    assert agents[0].memory.history[-1].forfeited
    assert not agents[0].memory.history[-1].won


def test_random_strategy_stays_in_range(registry, clock):
    agents = [Agent(name=n, strategy="random", rng=random.Random(i)) for i, n in enumerate("abcd")]
    game = registry.create_game(ADMIN)
    asyncio.run(play_round(game, agents, clock))
    for name in "abcd":
        assert 0 <= game.get_player(name).revealed_guess <= 1000


def test_llm_strategy_uses_model_answer(registry, clock):
    llm = FakeLLM(42)
    agents = level_k_agents()
    agents.append(Agent(name="Dave", strategy="llm", model="test/model", llm_client=llm))
    game = registry.create_game(ADMIN)
    asyncio.run(play_round(game, agents, clock))
    assert game.get_player("Dave").revealed_guess == 42
    system_prompt, user_prompt, model = llm.prompts[0]
    assert "Dave" in system_prompt
    assert "PLAYERS THIS ROUND: 4" in user_prompt
    assert model == "test/model"


def test_llm_strategy_falls_back_to_level_k():
    agent = Agent(name="Dave", strategy="llm", depth=1, llm_client=FakeLLM(None))
    assert asyncio.run(agent.choose_guess(3)) == 333


def test_agent_validation():
    with pytest.raises(ValueError):
        Agent(name="x", strategy="psychic")
    with pytest.raises(ValueError):
        Agent(name="x", strategy="llm")


def seeded_tie_winner(seed):
    clock = ManualClock(start=1_000)
    registry = GameRegistry(
        admin=ADMIN,
        defaults=GameConfig(entry_fee=1),
        clock=clock,
        entropy=tie_break_entropy(seed),
    )
    # 333, 333, 500: average 388, target 258, A and B tie at distance 75
    agents = [Agent(name="A", depth=1), Agent(name="B", depth=1), Agent(name="C", depth=0)]
    return asyncio.run(play_round(registry.create_game(ADMIN), agents, clock)).winner


def test_seed_makes_tie_breaks_reproducible():
    assert tie_break_entropy(None) is None
    winners = {seeded_tie_winner(7) for _ in range(5)}
    assert len(winners) == 1
    assert winners <= {"A", "B"}


def test_play_round_requires_enough_players(registry, clock):
    game = registry.create_game(ADMIN)
    with pytest.raises(ValueError):
        asyncio.run(play_round(game, level_k_agents()[:2], clock))
    assert game.player_count == 0


@pytest.mark.parametrize("text,expected", [
    ("I pick 42", 42),
    ("Others will think about 500, so\n222", 222),
    ("Between 10 and 1500", 10),
    ("1500", None),
    ("no idea", None),
    ("", None),
])
def test_parse_guess(text, expected):
    assert parse_guess(text) == expected
