"""Board generation: random fill followed by a re-roll loop until no run remains."""
from __future__ import annotations

import logging
import random
from typing import List, Sequence

from esper import World

from triplejoy.components.board import Board
from triplejoy.components.board_position import BoardPosition
from triplejoy.components.gem import GemType
from triplejoy.components.tile import Tile
from triplejoy.constants import MAX_GENERATION_PASSES, MAX_PLAYABLE_BOARD_ATTEMPTS, MIN_RUN_LENGTH
from triplejoy.errors import BoardGenerationError, PreconditionError
from triplejoy.systems.board_ops import Position, get_board, load_layout
from triplejoy.systems.match import scan_runs
from triplejoy.systems.move_validator import has_any_legal_move

logger = logging.getLogger(__name__)

Layout = List[List[GemType]]


def roll_layout(
    size: int,
    rng: random.Random,
    palette: Sequence[GemType] | None = None,
    *,
    max_passes: int = MAX_GENERATION_PASSES,
) -> Layout:
    """Fill a size x size layout uniformly, then re-roll matched cells until none remain.

    Pure apart from consuming ``rng``, so a seeded generator gives a repeatable board.
    """
    choices = list(palette or GemType.palette())
    if len(choices) < MIN_RUN_LENGTH:
        raise PreconditionError(f"Palette needs at least {MIN_RUN_LENGTH} gem kinds")
    if size < 1:
        raise PreconditionError("Board size must be positive")
    layout: Layout = [[rng.choice(choices) for _ in range(size)] for _ in range(size)]
    for passes in range(max_passes):
        types = {(r, c): layout[r][c] for r in range(size) for c in range(size)}
        matched: set[Position] = {pos for run in scan_runs(types, size) for pos in run}
        if not matched:
            logger.debug("Rolled %dx%d layout after %d re-roll passes", size, size, passes)
            return layout
        for row, col in sorted(matched):
            layout[row][col] = rng.choice(choices)
    raise BoardGenerationError(f"No match-free {size}x{size} layout after {max_passes} passes")


def create_board(world: World, size: int) -> int:
    """Create the board entity and one cell entity per position (gems unset until filled)."""
    board = Board(size=size)
    board_entity = world.create_entity(board)
    for row in range(size):
        for col in range(size):
            board.cells[(row, col)] = world.create_entity(
                BoardPosition(row=row, col=col),
                Tile(gem=GemType.RED),
            )
    return board_entity


def generate_board(world: World, size: int, rng: random.Random) -> int:
    """Create a board entity filled with a match-free layout."""
    board_entity = create_board(world, size)
    load_layout(world, roll_layout(size, rng))
    return board_entity


def fill_playable_board(
    world: World,
    rng: random.Random,
    *,
    max_attempts: int = MAX_PLAYABLE_BOARD_ATTEMPTS,
) -> None:
    """Refill the existing board with a match-free layout that has at least one legal move."""
    size = get_board(world).size
    for attempt in range(max_attempts):
        load_layout(world, roll_layout(size, rng))
        if has_any_legal_move(world):
            if attempt:
                logger.debug("Playable board found after %d rejected layouts", attempt)
            return
    raise BoardGenerationError(f"No playable {size}x{size} board after {max_attempts} attempts")
