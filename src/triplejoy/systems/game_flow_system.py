"""Session lifecycle coordinator: start, pause, resume, end and reset."""
from __future__ import annotations

import logging
import random

from esper import World

from triplejoy.components.game_state import EndReason, SessionPhase
from triplejoy.errors import InvalidPhaseError
from triplejoy.events.bus import (
    EVENT_BOARD_SETTLED,
    EVENT_GAME_OVER,
    EVENT_GAME_PAUSED,
    EVENT_GAME_RESET,
    EVENT_GAME_RESUMED,
    EVENT_GAME_STARTED,
    EVENT_LEVEL_COMPLETE,
    EVENT_TILE_DESELECTED,
    EVENT_TIME_EXPIRED,
    EventBus,
)
from triplejoy.factories.board import fill_playable_board
from triplejoy.systems.board_ops import board_size
from triplejoy.utils.game_state import get_game_state, get_selection, set_phase

logger = logging.getLogger(__name__)


class GameFlowSystem:
    """Owns every SessionPhase transition.

    ENDED is entered from ACTIVE (or PAUSED) either when the clock expires or
    when a settled board has no legal move left; only ``reset`` leaves it.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self.event_bus.subscribe(EVENT_BOARD_SETTLED, self._on_board_settled)
        self.event_bus.subscribe(EVENT_TIME_EXPIRED, self._on_time_expired)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_board_settled(self, sender, **payload) -> None:
        if payload.get("no_moves_left"):
            self.end(EndReason.NO_MOVES)

    def _on_time_expired(self, sender, **payload) -> None:
        self.end(EndReason.TIMEOUT)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        state = get_game_state(self.world)
        if state.phase is not SessionPhase.SETUP:
            raise InvalidPhaseError("start", state.phase)
        set_phase(self.world, self.event_bus, SessionPhase.ACTIVE)
        difficulty = state.difficulty
        size = board_size(self.world)
        logger.info(
            "Session started: %s, %dx%d board, %ds",
            difficulty.label, size, size, state.time_remaining,
        )
        self.event_bus.emit(
            EVENT_GAME_STARTED,
            difficulty=difficulty,
            size=size,
            time_limit=state.time_remaining,
        )

    def pause(self) -> None:
        state = get_game_state(self.world)
        if state.phase is not SessionPhase.ACTIVE:
            raise InvalidPhaseError("pause", state.phase)
        state.pause_count += 1
        set_phase(self.world, self.event_bus, SessionPhase.PAUSED)
        logger.info("Session paused with %ds left", state.time_remaining)
        self.event_bus.emit(EVENT_GAME_PAUSED, time_remaining=state.time_remaining)

    def resume(self) -> None:
        state = get_game_state(self.world)
        if state.phase is not SessionPhase.PAUSED:
            raise InvalidPhaseError("resume", state.phase)
        set_phase(self.world, self.event_bus, SessionPhase.ACTIVE)
        logger.info("Session resumed with %ds left", state.time_remaining)
        self.event_bus.emit(EVENT_GAME_RESUMED, time_remaining=state.time_remaining)

    def end(self, reason: EndReason) -> bool:
        """Enter ENDED; returns False when the session already ended or never started."""
        state = get_game_state(self.world)
        if not state.is_active:
            return False
        state.end_reason = reason
        state.busy = False
        self._drop_selection()
        set_phase(self.world, self.event_bus, SessionPhase.ENDED)
        logger.info("Session ended (%s) with score %d", reason.value, state.score)
        if reason is EndReason.NO_MOVES:
            self.event_bus.emit(
                EVENT_LEVEL_COMPLETE,
                level=state.level,
                score=state.score,
                elapsed=state.elapsed,
                pause_count=state.pause_count,
            )
        self.event_bus.emit(
            EVENT_GAME_OVER,
            reason=reason,
            score=state.score,
            level=state.level,
            elapsed=state.elapsed,
            pause_count=state.pause_count,
        )
        return True

    def reset(self) -> None:
        """Discard the session and start over with a fresh board and clock."""
        state = get_game_state(self.world)
        self._drop_selection()
        set_phase(self.world, self.event_bus, SessionPhase.SETUP)
        state.score = 0
        state.time_remaining = state.difficulty.time_limit
        state.end_reason = None
        state.elapsed = 0
        state.pause_count = 0
        state.busy = False
        fill_playable_board(self.world, self._rng)
        logger.info("Session reset")
        self.event_bus.emit(EVENT_GAME_RESET, difficulty=state.difficulty)
        self.start()

    def _drop_selection(self) -> None:
        selection = get_selection(self.world)
        prev = selection.position
        if prev is None:
            return
        selection.position = None
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason="session", prev_row=prev[0], prev_col=prev[1])
