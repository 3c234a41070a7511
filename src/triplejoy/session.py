"""Player-facing session API.

A host drives a session with two stimuli, taps and clock ticks, and reads
state back through ``snapshot``. Every mutating call returns the engine
events it caused, so a presentation layer can animate or persist them
without subscribing to anything.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from esper import World

from triplejoy.components.difficulty import Difficulty
from triplejoy.components.game_state import EndReason, SessionPhase
from triplejoy.constants import DEFAULT_TICK_SECONDS
from triplejoy.events.bus import EVENT_TICK, EventBus, GameEvent
from triplejoy.systems.achievement_system import AchievementSystem
from triplejoy.systems.board import BoardSystem, ClickKind
from triplejoy.systems.board_ops import BoardSnapshot, Position, board_snapshot
from triplejoy.systems.game_flow_system import GameFlowSystem
from triplejoy.systems.match_resolution import MatchResolutionSystem, ResolutionResult
from triplejoy.systems.move_validator import find_legal_moves
from triplejoy.systems.score_system import ScoreSystem
from triplejoy.systems.timer_system import TimerSystem
from triplejoy.utils.game_state import get_game_state, get_selection
from triplejoy.world import create_world

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SelectionChanged:
    selection: Optional[Position]
    previous: Optional[Position]
    events: Tuple[GameEvent, ...] = ()


@dataclass(frozen=True, slots=True)
class SwapResult:
    src: Position
    dst: Position
    score_delta: int
    board: BoardSnapshot
    matched_positions: frozenset
    resolution: ResolutionResult
    ended_reason: Optional[EndReason] = None
    events: Tuple[GameEvent, ...] = ()


@dataclass(frozen=True, slots=True)
class Ignored:
    position: Position
    reason: str


@dataclass(frozen=True, slots=True)
class TickResult:
    time_remaining: int
    ended_reason: Optional[EndReason] = None
    advanced: bool = True
    events: Tuple[GameEvent, ...] = ()


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    board: BoardSnapshot
    score: int
    time_remaining: int
    level: int
    difficulty: Difficulty
    phase: SessionPhase
    is_active: bool
    is_paused: bool
    selection: Optional[Position]
    busy: bool
    ended_reason: Optional[EndReason]


SelectOutcome = Union[SelectionChanged, SwapResult, Ignored]


class GameSession:
    """Stateful controller wiring one world, one bus and the gameplay systems.

    The bus is private to the session, so taps and ticks never reach another
    session's systems. Hosts that want the event stream pass a
    ``listener_bus``; every engine event is relayed to it with the session's
    own bus as the sender.
    """

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.EASY,
        *,
        rng: random.Random | None = None,
        listener_bus: EventBus | None = None,
        world: World | None = None,
        achievements: AchievementSystem | None = None,
    ) -> None:
        self.event_bus = EventBus()
        if listener_bus is not None:
            self.event_bus.relay_to(listener_bus)
        self.world = world or create_world(difficulty, rng=rng)
        self.difficulty = get_game_state(self.world).difficulty
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.resolution_system = MatchResolutionSystem(self.world, self.event_bus)
        self.score_system = ScoreSystem(self.world, self.event_bus)
        self.timer_system = TimerSystem(self.world, self.event_bus)
        self.game_flow = GameFlowSystem(self.world, self.event_bus)
        self.achievements = achievements
        if get_game_state(self.world).phase is SessionPhase.SETUP:
            self.game_flow.start()

    @property
    def state(self):
        return get_game_state(self.world)

    def select_or_swap(self, position: Position) -> SelectOutcome:
        self.resolution_system.last_result = None
        with self.event_bus.capture() as events:
            click = self.board_system.click(position)
        if click.kind is ClickKind.IGNORED:
            return Ignored(position=click.position, reason=click.reason or "ignored")
        if click.kind is ClickKind.SWAPPED:
            result = self.resolution_system.last_result
            if result is None:
                raise RuntimeError("Swap was requested but never resolved")
            logger.debug("Swap %s <-> %s scored %d", result.src, result.dst, result.score_delta)
            return SwapResult(
                src=result.src,
                dst=result.dst,
                score_delta=result.score_delta,
                board=result.board,
                matched_positions=result.matched_positions,
                resolution=result,
                ended_reason=self.state.end_reason,
                events=tuple(events),
            )
        return SelectionChanged(
            selection=get_selection(self.world).position,
            previous=click.previous,
            events=tuple(events),
        )

    def tick(self, delta_seconds: float = DEFAULT_TICK_SECONDS) -> TickResult:
        state = self.state
        before = state.time_remaining
        was_running = state.phase is SessionPhase.ACTIVE
        with self.event_bus.capture() as events:
            self.event_bus.emit(EVENT_TICK, dt=delta_seconds)
        return TickResult(
            time_remaining=state.time_remaining,
            ended_reason=state.end_reason,
            advanced=was_running and state.time_remaining != before,
            events=tuple(events),
        )

    def pause(self) -> Tuple[GameEvent, ...]:
        with self.event_bus.capture() as events:
            self.game_flow.pause()
        return tuple(events)

    def resume(self) -> Tuple[GameEvent, ...]:
        with self.event_bus.capture() as events:
            self.game_flow.resume()
        return tuple(events)

    def reset(self) -> Tuple[GameEvent, ...]:
        with self.event_bus.capture() as events:
            self.game_flow.reset()
        return tuple(events)

    def set_busy(self, busy: bool) -> None:
        """Host-controlled input lock, e.g. while a cascade is being animated."""
        self.state.busy = bool(busy)

    def hint(self) -> Optional[Tuple[Position, Position]]:
        if self.state.phase is not SessionPhase.ACTIVE:
            return None
        moves: List[Tuple[Position, Position]] = find_legal_moves(self.world)
        return moves[0] if moves else None

    def snapshot(self) -> SessionSnapshot:
        state = self.state
        return SessionSnapshot(
            board=board_snapshot(self.world),
            score=state.score,
            time_remaining=state.time_remaining,
            level=state.level,
            difficulty=state.difficulty,
            phase=state.phase,
            is_active=state.is_active,
            is_paused=state.is_paused,
            selection=get_selection(self.world).position,
            busy=state.busy,
            ended_reason=state.end_reason,
        )


def new_session(
    difficulty: Difficulty = Difficulty.EASY,
    *,
    rng: random.Random | None = None,
    listener_bus: EventBus | None = None,
    track_achievements: bool = False,
) -> GameSession:
    """Create a session that is already ACTIVE on a playable board.

    With ``track_achievements`` the achievement observer listens on
    ``listener_bus`` when one is given, so several sessions can feed one
    progress log.
    """
    session = GameSession(difficulty, rng=rng, listener_bus=listener_bus)
    if track_achievements:
        session.achievements = AchievementSystem(listener_bus or session.event_bus)
    return session
