from __future__ import annotations

from esper import World

from triplejoy.components.game_state import GameState, SessionPhase
from triplejoy.components.selection import Selection
from triplejoy.events.bus import EVENT_GAME_PHASE_CHANGED, EventBus


def get_game_state(world: World) -> GameState:
    """Return the shared GameState component, creating it if absent."""
    for _, state in world.get_component(GameState):
        return state
    state = GameState()
    world.create_entity(state, Selection())
    return state


def get_selection(world: World) -> Selection:
    for _, selection in world.get_component(Selection):
        return selection
    selection = Selection()
    world.create_entity(selection)
    return selection


def set_phase(world: World, event_bus: EventBus, phase: SessionPhase) -> bool:
    """Update the session phase and emit a change event when it differs."""

    state = get_game_state(world)
    previous_phase = state.phase
    if previous_phase is phase:
        return False
    state.phase = phase
    event_bus.emit(
        EVENT_GAME_PHASE_CHANGED,
        previous_phase=previous_phase,
        new_phase=phase,
    )
    return True
