import pytest

from twothirds.engine.clock import ManualClock
from twothirds.engine.commitment import compute_commitment
from twothirds.engine.config import GameConfig
from twothirds.engine.game import Game
from twothirds.engine.ledger import InMemoryLedger

from helpers import ADMIN, SALT, START


@pytest.fixture
def clock():
    return ManualClock(start=START)


@pytest.fixture
def config():
    # Quorum at START puts commit at 1050-1150 and reveal at 1150-1250
    return GameConfig(
        min_players=3,
        max_players=5,
        commit_duration=100,
        reveal_duration=100,
        entry_fee=1,
        service_fee_percent=5,
        auto_start_delay=50,
    )


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def game(config, clock, ledger):
    return Game(config, admin=ADMIN, ledger=ledger, clock=clock)


@pytest.fixture
def play(clock):
    """Run a game up to the EVALUATING phase.

    ``guesses`` maps player to guess; only players in ``revealers`` reveal
    (all of them by default).
    """
    def _play(game, guesses, revealers=None):
        for name in guesses:
            if name not in game.roster:
                game.join(name, game.config.entry_fee)
        clock.set(game.schedule.commit_start)
        for name, guess in guesses.items():
            game.commit(name, compute_commitment(guess, SALT))
        clock.set(game.schedule.commit_end)
        for name, guess in guesses.items():
            if revealers is None or name in revealers:
                game.reveal(name, guess, SALT)
        clock.set(game.schedule.reveal_end)
        return game

    return _play
