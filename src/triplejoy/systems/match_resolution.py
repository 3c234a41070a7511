from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from esper import World

from triplejoy.constants import MAX_CASCADE_DEPTH
from triplejoy.errors import CascadeLimitError, NotAdjacentError
from triplejoy.events.bus import (
    EVENT_BOARD_SETTLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_TILE_SWAP_REQUEST,
    EventBus,
)
from triplejoy.systems.board_ops import (
    BoardSnapshot,
    GravityMove,
    Position,
    TypeEntry,
    board_snapshot,
    check_position,
    clear_tiles_with_cascade,
    get_board,
    swap_gems,
)
from triplejoy.systems.match import find_match_groups
from triplejoy.systems.move_validator import has_any_legal_move, is_adjacent
from triplejoy.systems.score_system import points_for_match

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CascadeStep:
    """One clear -> drop -> refill round."""
    depth: int
    groups: Tuple[Tuple[Position, ...], ...]
    cleared: Tuple[TypeEntry, ...]
    gravity_moves: Tuple[GravityMove, ...]
    new_tiles: Tuple[Position, ...]
    points: int


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    src: Position
    dst: Position
    steps: Tuple[CascadeStep, ...]
    score_delta: int
    matched_positions: FrozenSet[Position]
    board: BoardSnapshot
    no_moves_left: bool

    @property
    def matched(self) -> bool:
        return bool(self.steps)

    @property
    def depth(self) -> int:
        return len(self.steps)


class MatchResolutionSystem:
    """Runs a swap to a settled board.

    Flow for one swap:
      - swap the two gems (adjacency already validated by the caller);
      - while runs exist: clear them, score them, drop survivors, refill;
      - report whether any legal move is left on the settled board.
    The whole loop runs synchronously, so no half-resolved board is ever visible.
    """
    def __init__(self, world: World, event_bus: EventBus, *, rng: random.Random | None = None):
        self.world = world
        self.event_bus = event_bus
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self.max_depth = MAX_CASCADE_DEPTH
        self.last_result: Optional[ResolutionResult] = None
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        self.resolve_swap(src, dst)

    def resolve_swap(self, src: Position, dst: Position) -> ResolutionResult:
        board = get_board(self.world)
        src = check_position(board, src)
        dst = check_position(board, dst)
        if not is_adjacent(src, dst):
            raise NotAdjacentError(src, dst)
        swap_gems(self.world, src, dst)
        logger.debug("Swapped %s <-> %s", src, dst)
        steps = self._resolve_cascades()
        matched_positions = frozenset(
            (row, col) for step in steps for (row, col, _) in step.cleared
        )
        score_delta = sum(step.points for step in steps)
        no_moves_left = not has_any_legal_move(self.world)
        result = ResolutionResult(
            src=src,
            dst=dst,
            steps=tuple(steps),
            score_delta=score_delta,
            matched_positions=matched_positions,
            board=board_snapshot(self.world),
            no_moves_left=no_moves_left,
        )
        self.last_result = result
        self.event_bus.emit(
            EVENT_BOARD_SETTLED,
            src=src,
            dst=dst,
            depth=result.depth,
            score_delta=score_delta,
            no_moves_left=no_moves_left,
        )
        return result

    def _resolve_cascades(self) -> List[CascadeStep]:
        steps: List[CascadeStep] = []
        depth = 0
        while True:
            groups = find_match_groups(self.world)
            if not groups:
                break
            depth += 1
            if depth > self.max_depth:
                raise CascadeLimitError(f"Cascade did not settle within {self.max_depth} steps")
            positions = sorted({pos for group in groups for pos in group})
            self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, groups=groups, size=len(positions), depth=depth)
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=positions)
            typed, moves, cascades, new_tiles = clear_tiles_with_cascade(self.world, positions, self._rng)
            points = points_for_match(len(typed))
            self.event_bus.emit(EVENT_MATCH_CLEARED, positions=positions, types=typed, points=points, depth=depth)
            if moves:
                self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=moves, cascades=cascades)
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)
            steps.append(CascadeStep(
                depth=depth,
                groups=tuple(tuple(group) for group in groups),
                cleared=tuple(typed),
                gravity_moves=tuple(moves),
                new_tiles=tuple(new_tiles),
                points=points,
            ))
        if depth:
            logger.debug("Cascade settled after %d steps", depth)
            self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
        return steps
