from twothirds.engine.config import GameConfig
from twothirds.engine.phases import GamePhase, PhaseSchedule, derive_phase

CONFIG = GameConfig(commit_duration=100, reveal_duration=200, auto_start_delay=30)
SCHEDULE = PhaseSchedule.from_quorum(1_000, CONFIG)


def test_schedule_boundaries():
    assert SCHEDULE.commit_start == 1_030
    assert SCHEDULE.commit_end == 1_130
    assert SCHEDULE.reveal_end == 1_330


def test_phase_at_each_boundary():
    assert SCHEDULE.phase_at(1_000) == GamePhase.GAME_STARTING
    assert SCHEDULE.phase_at(1_029) == GamePhase.GAME_STARTING
    assert SCHEDULE.phase_at(1_030) == GamePhase.COMMIT
    assert SCHEDULE.phase_at(1_129) == GamePhase.COMMIT
    assert SCHEDULE.phase_at(1_130) == GamePhase.REVEAL
    assert SCHEDULE.phase_at(1_329) == GamePhase.REVEAL
    assert SCHEDULE.phase_at(1_330) == GamePhase.EVALUATING
    assert SCHEDULE.phase_at(10**9) == GamePhase.EVALUATING


def test_deadline_only_for_timed_phases():
    assert SCHEDULE.deadline(GamePhase.GAME_STARTING) == 1_030
    assert SCHEDULE.deadline(GamePhase.COMMIT) == 1_130
    assert SCHEDULE.deadline(GamePhase.REVEAL) == 1_330
    assert SCHEDULE.deadline(GamePhase.EVALUATING) == 0
    assert SCHEDULE.deadline(GamePhase.WAITING_FOR_PLAYERS) == 0


def test_derive_phase_below_quorum_is_waiting():
    assert derive_phase(False, 2, 3, None, 5_000) == GamePhase.WAITING_FOR_PLAYERS


def test_derive_phase_uses_schedule_after_quorum():
    assert derive_phase(False, 3, 3, SCHEDULE, 1_031) == GamePhase.COMMIT


def test_terminal_latch_wins_over_time():
    assert derive_phase(True, 3, 3, SCHEDULE, 1_000) == GamePhase.ENDED
    assert derive_phase(True, 0, 3, None, 0) == GamePhase.ENDED


def test_phases_are_ordered():
    order = list(GamePhase)
    assert order == [
        GamePhase.WAITING_FOR_PLAYERS,
        GamePhase.GAME_STARTING,
        GamePhase.COMMIT,
        GamePhase.REVEAL,
        GamePhase.EVALUATING,
        GamePhase.ENDED,
    ]
    assert GamePhase.GAME_STARTING.label == "Game Starting"
