from esper import World

from triplejoy.constants import POINTS_PER_GEM
from triplejoy.events.bus import EVENT_MATCH_CLEARED, EVENT_SCORE_CHANGED, EventBus
from triplejoy.utils.game_state import get_game_state


def points_for_match(cleared: int) -> int:
    """Flat reward per cleared gem; run length and combos do not matter."""
    return cleared * POINTS_PER_GEM


class ScoreSystem:
    """Adds the points of every cleared match to the session score."""
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)

    def on_match_cleared(self, sender, **kwargs):
        points = kwargs.get('points')
        if points is None:
            points = points_for_match(len(kwargs.get('positions', [])))
        if points <= 0:
            return
        state = get_game_state(self.world)
        state.score += points
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=points)
