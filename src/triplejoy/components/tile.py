from dataclasses import dataclass

from triplejoy.components.gem import GemType

@dataclass(slots=True)
class Tile:
    """Per-cell gem assignment.

    ``matched`` is transient: it is set between detection and refill of one
    cascade step and is always False on a settled board.
    """
    gem: GemType
    matched: bool = False
