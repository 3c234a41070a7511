from __future__ import annotations

import random
from typing import Iterable, List, Sequence

from esper import World

from triplejoy.components.difficulty import Difficulty
from triplejoy.components.gem import GemType
from triplejoy.systems.board_ops import load_layout
from triplejoy.world import create_world

LETTERS = {
    'R': GemType.RED,
    'B': GemType.BLUE,
    'G': GemType.GREEN,
    'Y': GemType.YELLOW,
    'P': GemType.PURPLE,
    'O': GemType.ORANGE,
}
PALETTE_ORDER = "RBGYPO"


class ScriptedRandom(random.Random):
    """Random source whose ``choice`` replays a fixed script before falling back to the seed."""

    def __init__(self, script: Iterable[GemType] = (), seed: int = 0):
        super().__init__(seed)
        self.script: List[GemType] = list(script)

    def choice(self, seq):
        if self.script:
            return self.script.pop(0)
        return super().choice(seq)


def stripes(size: int = 5) -> List[str]:
    """Rows where cell (r, c) holds kind (c + 3r) % 6: no runs and no legal move."""
    return [
        "".join(PALETTE_ORDER[(col + 3 * row) % 6] for col in range(size))
        for row in range(size)
    ]


def with_cells(rows: Sequence[str], **cells: str) -> List[str]:
    """Return rows with overrides given as r<row>c<col>='X'."""
    grid = [list(row) for row in rows]
    for key, letter in cells.items():
        row, col = key[1:].split('c')
        grid[int(row)][int(col)] = letter
    return ["".join(row) for row in grid]


def to_letters(snapshot) -> List[str]:
    reverse = {gem: letter for letter, gem in LETTERS.items()}
    return ["".join(reverse[gem] for gem in row) for row in snapshot]


def world_from_rows(
    rows: Sequence[str],
    difficulty: Difficulty = Difficulty.EASY,
    rng: random.Random | None = None,
) -> World:
    world = create_world(difficulty, rng=rng or random.Random(0), playable=False)
    load_layout(world, [[LETTERS[letter] for letter in row] for row in rows])
    return world


REFILL = [GemType.RED, GemType.BLUE, GemType.GREEN, GemType.YELLOW, GemType.PURPLE]


def five_in_a_row() -> List[str]:
    """Stripes with row 4 set to O O G O O; swapping (3, 2) down lines up five oranges."""
    return with_cells(stripes(), r4c0='O', r4c1='O', r4c3='O', r4c4='O')
