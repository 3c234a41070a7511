from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from blinker import Signal


@dataclass(frozen=True, slots=True)
class GameEvent:
    """One emitted engine event, as recorded by ``EventBus.capture``."""
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}
        self._captures: List[List[GameEvent]] = []
        self._relays: List["EventBus"] = []

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def relay_to(self, listener: "EventBus"):
        """Forward every event emitted here to ``listener``, with this bus as sender."""
        if listener is self:
            raise ValueError("An event bus cannot relay to itself")
        if listener not in self._relays:
            self._relays.append(listener)

    def emit(self, name: str, **payload):
        self._dispatch(name, payload, self)

    def _dispatch(self, name: str, payload: Dict[str, Any], sender):
        for captured in self._captures:
            captured.append(GameEvent(name=name, payload=dict(payload)))
        # Listeners see events in the same order as captures do.
        for listener in self._relays:
            listener._dispatch(name, payload, sender)
        sig = self._signals.get(name)
        if sig:
            sig.send(sender, **payload)

    @contextmanager
    def capture(self) -> Iterator[List[GameEvent]]:
        """Record every event emitted inside the block, in emission order."""
        captured: List[GameEvent] = []
        self._captures.append(captured)
        try:
            yield captured
        finally:
            self._captures.remove(captured)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                          # payload: dt=int
EVENT_TIME_CHANGED = "time_changed"          # payload: time_remaining=int, delta=int
EVENT_TIME_EXPIRED = "time_expired"          # payload: elapsed=int


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col, previous=(r,c)|None
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], size=int, depth=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], types=[(r,c,gem)], points=int, depth=int
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[GravityMove], cascades=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int
EVENT_BOARD_SETTLED = "board_settled"              # payload: no_moves_left=bool, score_delta=int


# ============================================================================
# SCORE & ACHIEVEMENTS
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int
EVENT_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"  # payload: title=str


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_PHASE_CHANGED = "game_phase_changed"    # payload: previous_phase=SessionPhase|None, new_phase=SessionPhase
EVENT_GAME_STARTED = "game_started"                # payload: difficulty=Difficulty, size=int, time_limit=int
EVENT_GAME_PAUSED = "game_paused"                  # payload: time_remaining=int
EVENT_GAME_RESUMED = "game_resumed"                # payload: time_remaining=int
EVENT_LEVEL_COMPLETE = "level_complete"            # payload: level=int, score=int, elapsed=int, pause_count=int
EVENT_GAME_OVER = "game_over"                      # payload: reason=EndReason, score=int, level=int, elapsed=int, pause_count=int
EVENT_GAME_RESET = "game_reset"                    # payload: difficulty=Difficulty
