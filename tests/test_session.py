import random

import pytest

from triplejoy.components.difficulty import Difficulty
from triplejoy.components.game_state import EndReason, SessionPhase
from triplejoy.errors import InvalidPhaseError, PositionOutOfBoundsError, PreconditionError
from triplejoy.events.bus import (
    EVENT_BOARD_SETTLED,
    EVENT_GAME_OVER,
    EVENT_GAME_RESET,
    EVENT_LEVEL_COMPLETE,
    EVENT_MATCH_CLEARED,
    EVENT_SCORE_CHANGED,
    EVENT_TICK,
    EVENT_TILE_CLICK,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TIME_CHANGED,
    EventBus,
)
from triplejoy.session import GameSession, Ignored, SelectionChanged, SwapResult, new_session
from triplejoy.systems.match import find_matches
from triplejoy.systems.move_validator import is_adjacent
from tests.helpers import REFILL, ScriptedRandom, five_in_a_row, stripes, world_from_rows


@pytest.fixture
def session():
    return new_session(Difficulty.EASY, rng=random.Random(7))


def test_new_session_starts_active(session):
    snap = session.snapshot()
    assert snap.phase is SessionPhase.ACTIVE
    assert snap.is_active and not snap.is_paused
    assert (snap.score, snap.time_remaining, snap.level) == (0, 120, 1)
    assert len(snap.board) == 5 and all(len(row) == 5 for row in snap.board)
    assert snap.selection is None
    assert snap.ended_reason is None


def test_selection_protocol(session):
    before = session.snapshot().board
    first = session.select_or_swap((0, 0))
    assert isinstance(first, SelectionChanged) and first.selection == (0, 0)
    again = session.select_or_swap((0, 0))
    assert isinstance(again, SelectionChanged) and again.selection is None
    session.select_or_swap((0, 0))
    moved = session.select_or_swap((2, 2))
    assert isinstance(moved, SelectionChanged)
    assert moved.selection == (2, 2) and moved.previous == (0, 0)
    assert session.snapshot().board == before


def test_adjacent_tap_swaps_and_clears_selection(session):
    session.select_or_swap((2, 2))
    outcome = session.select_or_swap((2, 3))
    assert isinstance(outcome, SwapResult)
    assert (outcome.src, outcome.dst) == ((2, 2), (2, 3))
    assert session.snapshot().selection is None
    assert find_matches(session.world) == set()
    assert EVENT_TILE_SWAP_REQUEST in [event.name for event in outcome.events]


@pytest.mark.parametrize("seed", range(5))
def test_board_only_mutates_on_adjacent_pairs(seed):
    session = new_session(rng=random.Random(seed))
    picker = random.Random(seed)
    for _ in range(40):
        if session.snapshot().phase is not SessionPhase.ACTIVE:
            break
        before = session.snapshot()
        pos = (picker.randrange(5), picker.randrange(5))
        outcome = session.select_or_swap(pos)
        if isinstance(outcome, SwapResult):
            assert before.selection is not None and is_adjacent(before.selection, pos)
        else:
            assert session.snapshot().board == before.board


def test_swap_scores_and_reports_events():
    world = world_from_rows(five_in_a_row(), rng=ScriptedRandom(REFILL))
    session = GameSession(world=world)
    session.select_or_swap((3, 2))
    outcome = session.select_or_swap((4, 2))
    assert isinstance(outcome, SwapResult)
    assert outcome.score_delta == 50
    assert session.snapshot().score == 50
    names = [event.name for event in outcome.events]
    assert names.index(EVENT_TILE_SWAP_REQUEST) < names.index(EVENT_MATCH_CLEARED)
    assert names.index(EVENT_MATCH_CLEARED) < names.index(EVENT_SCORE_CHANGED)
    assert names[-1] == EVENT_BOARD_SETTLED


def test_no_moves_left_ends_session():
    session = GameSession(world=world_from_rows(stripes()))
    assert session.snapshot().phase is SessionPhase.ACTIVE
    session.select_or_swap((0, 0))
    outcome = session.select_or_swap((0, 1))
    assert isinstance(outcome, SwapResult)
    assert outcome.score_delta == 0
    assert outcome.ended_reason is EndReason.NO_MOVES
    snap = session.snapshot()
    assert snap.phase is SessionPhase.ENDED
    assert not snap.is_active
    names = [event.name for event in outcome.events]
    assert EVENT_LEVEL_COMPLETE in names and EVENT_GAME_OVER in names
    ignored = session.select_or_swap((1, 1))
    assert isinstance(ignored, Ignored) and ignored.reason == "ended"


def test_timeout_after_time_limit_ticks(session):
    for _ in range(119):
        result = session.tick()
        assert result.ended_reason is None
    assert session.snapshot().time_remaining == 1
    final = session.tick()
    assert final.time_remaining == 0
    assert final.ended_reason is EndReason.TIMEOUT
    assert session.snapshot().phase is SessionPhase.ENDED
    assert EVENT_GAME_OVER in [event.name for event in final.events]
    after = session.tick()
    assert not after.advanced and after.time_remaining == 0


def test_fractional_ticks_accumulate(session):
    session.tick(0.5)
    assert session.snapshot().time_remaining == 120
    session.tick(0.5)
    assert session.snapshot().time_remaining == 119
    session.tick(10)
    assert session.snapshot().time_remaining == 109


def test_tenth_second_ticks_add_up_exactly(session):
    for _ in range(10):
        session.tick(0.1)
    assert session.snapshot().time_remaining == 119
    for _ in range(30):
        session.tick(0.1)
    assert session.snapshot().time_remaining == 116


def test_negative_tick_rejected(session):
    with pytest.raises(PreconditionError):
        session.tick(-1)


def test_pause_freezes_timer_and_input(session):
    session.tick()
    session.pause()
    snap = session.snapshot()
    assert snap.is_paused and snap.is_active
    frozen = session.tick()
    assert not frozen.advanced and frozen.time_remaining == 119
    ignored = session.select_or_swap((0, 0))
    assert isinstance(ignored, Ignored) and ignored.reason == "paused"
    with pytest.raises(InvalidPhaseError):
        session.pause()
    session.resume()
    assert session.tick().time_remaining == 118
    with pytest.raises(InvalidPhaseError):
        session.resume()


def test_busy_flag_ignores_taps(session):
    session.set_busy(True)
    outcome = session.select_or_swap((0, 0))
    assert isinstance(outcome, Ignored) and outcome.reason == "busy"
    session.set_busy(False)
    assert isinstance(session.select_or_swap((0, 0)), SelectionChanged)


def test_out_of_bounds_tap_fails_fast(session):
    with pytest.raises(PositionOutOfBoundsError):
        session.select_or_swap((5, 0))


def test_tile_click_event_drives_selection(session):
    session.event_bus.emit(EVENT_TILE_CLICK, row=1, col=2)
    assert session.board_system.selected == (1, 2)
    assert session.snapshot().selection == (1, 2)
    session.event_bus.emit(EVENT_TILE_CLICK, row=1, col=2)
    assert session.board_system.selected is None


def test_sessions_sharing_a_listener_stay_independent():
    listener = EventBus()
    senders = []
    listener.subscribe(EVENT_TIME_CHANGED, lambda sender, **k: senders.append(sender))
    first = new_session(rng=random.Random(1), listener_bus=listener)
    second = new_session(rng=random.Random(2), listener_bus=listener)
    second_board = second.snapshot().board

    first.tick()
    assert first.snapshot().time_remaining == 119
    assert second.snapshot().time_remaining == 120
    assert senders == [first.event_bus]

    first.select_or_swap((0, 0))
    first.select_or_swap((0, 1))
    assert second.snapshot().board == second_board
    assert second.snapshot().selection is None

    listener.emit(EVENT_TICK, dt=5)
    assert first.snapshot().time_remaining == 119
    assert second.snapshot().time_remaining == 120


def test_reset_restores_fresh_session(session):
    for _ in range(120):
        session.tick()
    assert session.snapshot().phase is SessionPhase.ENDED
    events = session.reset()
    snap = session.snapshot()
    assert snap.phase is SessionPhase.ACTIVE
    assert (snap.score, snap.time_remaining) == (0, 120)
    assert snap.ended_reason is None
    assert find_matches(session.world) == set()
    assert EVENT_GAME_RESET in [event.name for event in events]
    assert session.hint() is not None


def test_hint_is_a_legal_swap(session):
    src, dst = session.hint()
    assert is_adjacent(src, dst)
    session.select_or_swap(src)
    outcome = session.select_or_swap(dst)
    assert isinstance(outcome, SwapResult) and outcome.score_delta >= 30


def test_score_never_decreases():
    session = new_session(Difficulty.MEDIUM, rng=random.Random(3))
    last = 0
    for _ in range(25):
        hint = session.hint()
        if hint is None:
            break
        session.select_or_swap(hint[0])
        session.select_or_swap(hint[1])
        session.tick()
        score = session.snapshot().score
        assert score >= last
        last = score
    assert last > 0
