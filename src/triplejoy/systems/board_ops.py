from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from esper import World

from triplejoy.components.board import Board
from triplejoy.components.gem import GemType
from triplejoy.components.tile import Tile
from triplejoy.errors import PositionOutOfBoundsError, PreconditionError

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
TypeEntry = Tuple[int, int, GemType]
BoardSnapshot = Tuple[Tuple[GemType, ...], ...]


@dataclass(frozen=True, slots=True)
class GravityMove:
    source: Position
    target: Position
    gem: GemType


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found")


def board_size(world: World) -> int:
    return get_board(world).size


def check_position(board: Board, pos: Position) -> Position:
    row, col = pos
    if not board.contains(row, col):
        raise PositionOutOfBoundsError(pos, board.size)
    return row, col


def get_entity_at(world: World, row: int, col: int) -> int:
    board = get_board(world)
    check_position(board, (row, col))
    return board.cells[(row, col)]


def get_tile(world: World, pos: Position) -> Tile:
    return world.component_for_entity(get_entity_at(world, *pos), Tile)


def get_gem(world: World, pos: Position) -> GemType:
    return get_tile(world, pos).gem


def set_gem(world: World, pos: Position, gem: GemType) -> None:
    tile = get_tile(world, pos)
    tile.gem = gem
    tile.matched = False


def swap_gems(world: World, a: Position, b: Position) -> None:
    """Swap the gems held by two cells. Adjacency is the caller's concern."""
    tile_a = get_tile(world, a)
    tile_b = get_tile(world, b)
    tile_a.gem, tile_b.gem = tile_b.gem, tile_a.gem


def gem_map(world: World) -> Dict[Position, GemType]:
    """Return mapping of unmatched cell positions to their gems."""
    board = get_board(world)
    mapping: Dict[Position, GemType] = {}
    for pos, entity in board.cells.items():
        tile: Tile = world.component_for_entity(entity, Tile)
        if tile.matched:
            continue
        mapping[pos] = tile.gem
    return mapping


def board_snapshot(world: World) -> BoardSnapshot:
    board = get_board(world)
    rows = []
    for row in range(board.size):
        rows.append(tuple(
            world.component_for_entity(board.cells[(row, col)], Tile).gem
            for col in range(board.size)
        ))
    return tuple(rows)


def load_layout(world: World, layout: Sequence[Sequence[GemType]]) -> None:
    """Overwrite every cell from a row-major layout of matching size."""
    board = get_board(world)
    if len(layout) != board.size or any(len(row) != board.size for row in layout):
        raise PreconditionError(f"Layout must be {board.size}x{board.size}")
    for row, row_values in enumerate(layout):
        for col, gem in enumerate(row_values):
            set_gem(world, (row, col), gem)


def mark_matched(world: World, positions: Iterable[Position]) -> List[TypeEntry]:
    typed: List[TypeEntry] = []
    for row, col in sorted(positions):
        tile = get_tile(world, (row, col))
        if tile.matched:
            continue
        typed.append((row, col, tile.gem))
        tile.matched = True
    return typed


def compute_gravity_moves(world: World) -> Tuple[List[GravityMove], int]:
    """Plan the fall of unmatched gems toward the bottom row (highest index).

    Columns are independent and survivors keep their relative order.
    """
    board = get_board(world)
    moves: List[GravityMove] = []
    cascades = 0
    for col in range(board.size):
        survivors: List[Tuple[int, GemType]] = []
        for row in range(board.size):
            tile: Tile = world.component_for_entity(board.cells[(row, col)], Tile)
            if not tile.matched:
                survivors.append((row, tile.gem))
        offset = board.size - len(survivors)
        column_moved = False
        for index, (original_row, gem) in enumerate(survivors):
            target_row = offset + index
            if original_row == target_row:
                continue
            moves.append(GravityMove(source=(original_row, col), target=(target_row, col), gem=gem))
            column_moved = True
        if column_moved:
            cascades += 1
    return moves, cascades


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    """Apply planned moves; vacated cells above the survivors become matched (empty)."""
    if not moves:
        return
    board = get_board(world)
    columns = sorted({move.target[1] for move in moves})
    landed = {move.target: move.gem for move in moves}
    for col in columns:
        survivors = 0
        for row in range(board.size):
            if not get_tile(world, (row, col)).matched:
                survivors += 1
        offset = board.size - survivors
        for row in range(board.size - 1, -1, -1):
            tile = get_tile(world, (row, col))
            if row < offset:
                tile.matched = True
            elif (row, col) in landed:
                tile.gem = landed[(row, col)]
                tile.matched = False


def refill_matched_tiles(world: World, rng: random.Random, palette: Sequence[GemType] | None = None) -> List[Position]:
    choices = list(palette or GemType.palette())
    board = get_board(world)
    spawned: List[Position] = []
    for row in range(board.size):
        for col in range(board.size):
            tile: Tile = world.component_for_entity(board.cells[(row, col)], Tile)
            if not tile.matched:
                continue
            tile.gem = rng.choice(choices)
            tile.matched = False
            spawned.append((row, col))
    return spawned


def clear_tiles_with_cascade(world: World, positions: Iterable[Position], rng: random.Random):
    """Clear tiles at positions, apply gravity and refill, and return board change metadata."""
    typed = mark_matched(world, positions)
    if not typed:
        return [], [], 0, []
    moves, cascades = compute_gravity_moves(world)
    apply_gravity_moves(world, moves)
    new_tiles = refill_matched_tiles(world, rng)
    logger.debug(
        "Cleared %d tiles, %d gravity moves over %d columns, %d refilled",
        len(typed), len(moves), cascades, len(new_tiles),
    )
    return typed, moves, cascades, new_tiles
