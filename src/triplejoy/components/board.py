from dataclasses import dataclass, field
from typing import Dict, Tuple

@dataclass(slots=True)
class Board:
    """Square board; ``cells`` indexes the cell entity at each (row, col)."""
    size: int
    cells: Dict[Tuple[int, int], int] = field(default_factory=dict)

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size
