from enum import Enum
from typing import List


class GemType(Enum):
    """The fixed gem palette. Gems carry no identity beyond their kind."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"

    @classmethod
    def palette(cls) -> List["GemType"]:
        return list(cls)
