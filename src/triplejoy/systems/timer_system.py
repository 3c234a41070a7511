from fractions import Fraction

from esper import World

from triplejoy.components.game_state import SessionPhase
from triplejoy.constants import DEFAULT_TICK_SECONDS
from triplejoy.errors import PreconditionError
from triplejoy.events.bus import (
    EVENT_GAME_RESET,
    EVENT_TICK,
    EVENT_TIME_CHANGED,
    EVENT_TIME_EXPIRED,
    EventBus,
)
from triplejoy.utils.game_state import get_game_state


class TimerSystem:
    """Counts the session clock down from host-driven ticks.

    The engine never reads a real clock: each EVENT_TICK carries ``dt`` in
    seconds. Fractional deltas accumulate until a whole second has passed.
    Ticks are ignored unless the session is ACTIVE.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self._carry = Fraction(0)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_GAME_RESET, self.on_game_reset)

    def on_game_reset(self, sender, **kwargs):
        self._carry = Fraction(0)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', DEFAULT_TICK_SECONDS)
        if dt < 0:
            raise PreconditionError(f"Tick delta must be non-negative, got {dt}")
        state = get_game_state(self.world)
        if state.phase is not SessionPhase.ACTIVE:
            return
        # str() keeps 0.1 as exactly one tenth, so ten such ticks make a second.
        self._carry += Fraction(str(dt))
        whole = int(self._carry)
        if whole <= 0:
            return
        self._carry -= whole
        step = min(whole, state.time_remaining)
        state.time_remaining -= step
        state.elapsed += step
        self.event_bus.emit(EVENT_TIME_CHANGED, time_remaining=state.time_remaining, delta=step)
        if state.time_remaining == 0:
            self.event_bus.emit(EVENT_TIME_EXPIRED, elapsed=state.elapsed)
