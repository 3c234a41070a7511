import random

from triplejoy.components.game_state import EndReason
from triplejoy.events.bus import (
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_GAME_OVER,
    EVENT_MATCH_CLEARED,
    EventBus,
)
from triplejoy.session import new_session
from triplejoy.systems.achievement_system import (
    DEDICATED_PLAYER,
    FIRST_STEPS,
    GEM_COLLECTOR,
    HIGH_SCORER,
    PERFECTIONIST,
    SCORE_MASTER,
    SPEED_DEMON,
    AchievementSystem,
)


def _game_over(bus, score=0, reason=EndReason.TIMEOUT, elapsed=120, pause_count=0):
    bus.emit(EVENT_GAME_OVER, reason=reason, score=score, level=1, elapsed=elapsed, pause_count=pause_count)


def test_default_achievements_start_locked():
    system = AchievementSystem(EventBus())
    assert len(system.log.achievements) == 8
    assert system.log.unlocked_count == 0
    assert system.log.completion == 0.0


def test_first_level_and_score_totals():
    bus = EventBus()
    unlocked = []
    bus.subscribe(EVENT_ACHIEVEMENT_UNLOCKED, lambda s, **k: unlocked.append(k['title']))
    system = AchievementSystem(bus)
    _game_over(bus, score=600)
    assert FIRST_STEPS in unlocked
    assert HIGH_SCORER in unlocked
    assert SCORE_MASTER not in unlocked
    _game_over(bus, score=400)
    assert SCORE_MASTER in unlocked
    assert system.log.total_score == 1000
    assert system.log.levels_completed == 2
    assert unlocked.count(FIRST_STEPS) == 1


def test_gem_collector_counts_cleared_cells():
    bus = EventBus()
    system = AchievementSystem(bus)
    achievement = system.log.by_title()[GEM_COLLECTOR]
    for _ in range(10):
        bus.emit(EVENT_MATCH_CLEARED, positions=[(0, c) for c in range(5)], points=50)
    assert achievement.progress == 0.5
    assert not achievement.unlocked
    for _ in range(10):
        bus.emit(EVENT_MATCH_CLEARED, positions=[(0, c) for c in range(5)], points=50)
    assert achievement.progress == 1.0
    assert achievement.current_value == 100
    assert achievement.unlocked


def test_speed_and_perfection_need_no_moves_finish():
    bus = EventBus()
    system = AchievementSystem(bus)
    _game_over(bus, reason=EndReason.TIMEOUT, elapsed=30)
    titles = system.log.by_title()
    assert titles[SPEED_DEMON].current_value == 0
    assert titles[PERFECTIONIST].current_value == 0
    _game_over(bus, reason=EndReason.NO_MOVES, elapsed=45)
    assert titles[SPEED_DEMON].unlocked
    assert titles[PERFECTIONIST].current_value == 1
    _game_over(bus, reason=EndReason.NO_MOVES, elapsed=90, pause_count=2)
    assert titles[PERFECTIONIST].current_value == 1


def test_dedicated_player_and_reset():
    bus = EventBus()
    system = AchievementSystem(bus)
    for _ in range(25):
        _game_over(bus)
    assert system.log.by_title()[DEDICATED_PLAYER].unlocked
    system.reset_progress()
    assert system.log.levels_completed == 0
    assert system.log.unlocked_count == 0


def test_session_feeds_achievements():
    session = new_session(rng=random.Random(11), track_achievements=True)
    for _ in range(120):
        session.tick()
    log = session.achievements.log
    assert log.levels_completed == 1
    assert log.by_title()[FIRST_STEPS].unlocked


def test_one_log_fed_by_several_sessions():
    listener = EventBus()
    system = AchievementSystem(listener)
    sessions = [new_session(rng=random.Random(seed), listener_bus=listener) for seed in (3, 4)]
    for session in sessions:
        for _ in range(120):
            session.tick()
    assert system.log.levels_completed == 2
    assert system.log.by_title()[FIRST_STEPS].unlocked
