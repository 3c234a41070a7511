"""Adjacency rules and legal-move search.

Hypothetical swaps are evaluated on a copied gem map, so the board is never
mutated, not even transiently.
"""
from typing import Dict, List, Tuple

from esper import World

from triplejoy.components.gem import GemType
from triplejoy.systems.board_ops import Position, check_position, gem_map, get_board
from triplejoy.systems.match import has_line_match

_DIRECTIONS = ((0, 1), (1, 0), (0, -1), (-1, 0))


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def predict_swap_creates_match(types: Dict[Position, GemType], src: Position, dst: Position) -> bool:
    """Return True if swapping src/dst in ``types`` would create a run through either cell."""
    if src not in types or dst not in types:
        return False
    swapped = types.copy()
    swapped[src], swapped[dst] = swapped[dst], swapped[src]
    return has_line_match(swapped, src) or has_line_match(swapped, dst)


def would_match(world: World, a: Position, b: Position) -> bool:
    board = get_board(world)
    check_position(board, a)
    check_position(board, b)
    return predict_swap_creates_match(gem_map(world), a, b)


def _neighbours(pos: Position, size: int):
    row, col = pos
    for dr, dc in _DIRECTIONS:
        nr, nc = row + dr, col + dc
        if 0 <= nr < size and 0 <= nc < size:
            yield nr, nc


def has_any_legal_move(world: World) -> bool:
    """True as soon as any adjacent swap would produce a run."""
    size = get_board(world).size
    types = gem_map(world)
    for row in range(size):
        for col in range(size):
            for neighbour in _neighbours((row, col), size):
                if predict_swap_creates_match(types, (row, col), neighbour):
                    return True
    return False


def find_legal_moves(world: World) -> List[Tuple[Position, Position]]:
    """Enumerate each matching adjacent swap once, as (pos, right) or (pos, down)."""
    size = get_board(world).size
    types = gem_map(world)
    swaps: List[Tuple[Position, Position]] = []
    for row in range(size):
        for col in range(size):
            pos = (row, col)
            right = (row, col + 1)
            if col + 1 < size and predict_swap_creates_match(types, pos, right):
                swaps.append((pos, right))
            down = (row + 1, col)
            if row + 1 < size and predict_swap_creates_match(types, pos, down):
                swaps.append((pos, down))
    return swaps
