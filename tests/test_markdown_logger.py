from twothirds.communication.markdown_logger import MarkdownLogger
from twothirds.engine.commitment import compute_commitment
from twothirds.engine.config import GameConfig
from twothirds.engine.registry import GameRegistry

from helpers import SALT


def test_unstarted_logger_writes_nothing(tmp_path):
    logger = MarkdownLogger(base_dir=str(tmp_path / "logs"))
    logger.log_join("alice", 1, 5)
    logger.log_withdrawal("alice", 1)
    assert logger.game_file is None
    assert not (tmp_path / "logs").exists()


def test_registry_games_write_full_log(tmp_path, clock):
    registry = GameRegistry(
        admin="house",
        defaults=GameConfig(entry_fee=1),
        clock=clock,
        log_dir=str(tmp_path),
    )
    game = registry.create_game("alice")
    guesses = {"alice": 300, "bob": 600, "carol": 900}
    for name in guesses:
        game.join(name, 1)
    clock.set(game.schedule.commit_start)
    for name, guess in guesses.items():
        game.commit(name, compute_commitment(guess, SALT))
    clock.set(game.schedule.commit_end)
    game.reveal("alice", 300, SALT)
    game.reveal("bob", 600, SALT)
    clock.set(game.schedule.reveal_end)
    game.finalize("carol")
    game.withdraw("alice")

    text = (tmp_path / "game_0001" / "game_state.md").read_text()
    assert text.startswith("# Two-Thirds Game - game_0001")
    assert "| entry_fee | 1 |" in text
    assert "created by **alice**" in text
    assert "**carol** joined (3/15)" in text
    assert "Quorum reached at 1000" in text
    assert "**alice** revealed 300" in text
    assert "# GAME OVER" in text
    assert "Target (2/3 of average): 300" in text
    assert "| carol | Yes | No | - | - |" in text
    assert "Finalized by: carol" in text
    assert "withdrew 3" in text


def test_forfeited_game_log(tmp_path, clock):
    registry = GameRegistry(admin="house", clock=clock, log_dir=str(tmp_path))
    game = registry.create_game("house")
    for name in ("a", "b", "c"):
        game.join(name, game.config.entry_fee)
    clock.set(game.schedule.reveal_end)
    game.finalize()

    text = (tmp_path / "game_0001" / "game_state.md").read_text()
    assert "Nobody revealed" in text
    assert "Winner: **house**" in text


def test_failed_write_is_reported_not_raised(tmp_path, caplog):
    logger = MarkdownLogger(base_dir=str(tmp_path))
    logger.start_game("game_0001")
    logger.game_file.unlink()
    logger.game_file.mkdir()
    with caplog.at_level("WARNING", logger="twothirds.communication.markdown_logger"):
        logger.log_join("alice", 1, 5)
    assert "could not write" in caplog.text
