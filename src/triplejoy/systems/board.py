from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from esper import World

from triplejoy.components.game_state import SessionPhase
from triplejoy.events.bus import (
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_REQUEST,
    EventBus,
)
from triplejoy.systems.board_ops import Position, check_position, get_board
from triplejoy.systems.move_validator import is_adjacent
from triplejoy.utils.game_state import get_game_state, get_selection


class ClickKind(Enum):
    SELECTED = auto()
    DESELECTED = auto()
    SWAPPED = auto()
    IGNORED = auto()


@dataclass(frozen=True, slots=True)
class ClickResult:
    kind: ClickKind
    position: Position
    previous: Optional[Position] = None
    reason: Optional[str] = None

    @property
    def swap(self) -> Optional[Tuple[Position, Position]]:
        if self.kind is ClickKind.SWAPPED and self.previous is not None:
            return self.previous, self.position
        return None


class BoardSystem:
    """Applies the tap protocol to the shared Selection.

    - no selection: select the tapped cell;
    - tapped the selected cell: deselect;
    - tapped a neighbour: request a swap and clear the selection, match or not;
    - tapped anything else: move the selection there.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)

    @property
    def selected(self) -> Optional[Position]:
        return get_selection(self.world).position

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.click((row, col))

    def click(self, pos: Position) -> ClickResult:
        pos = check_position(get_board(self.world), pos)
        state = get_game_state(self.world)
        if state.phase is not SessionPhase.ACTIVE:
            return ClickResult(ClickKind.IGNORED, pos, reason=state.phase.name.lower())
        if state.busy:
            return ClickResult(ClickKind.IGNORED, pos, reason="busy")
        selection = get_selection(self.world)
        prev = selection.position
        if prev is None:
            selection.position = pos
            self.event_bus.emit(EVENT_TILE_SELECTED, row=pos[0], col=pos[1], previous=None)
            return ClickResult(ClickKind.SELECTED, pos)
        if prev == pos:
            self.clear_selection(reason="retap")
            return ClickResult(ClickKind.DESELECTED, pos, previous=prev)
        if is_adjacent(prev, pos):
            selection.position = None
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=prev, dst=pos)
            return ClickResult(ClickKind.SWAPPED, pos, previous=prev)
        selection.position = pos
        self.event_bus.emit(EVENT_TILE_SELECTED, row=pos[0], col=pos[1], previous=prev)
        return ClickResult(ClickKind.SELECTED, pos, previous=prev)

    def clear_selection(self, reason: str) -> Optional[Position]:
        selection = get_selection(self.world)
        prev = selection.position
        if prev is None:
            return None
        selection.position = None
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])
        return prev
