"""Difficulty presets mapping to board size and time budget."""
from enum import Enum


class Difficulty(Enum):
    EASY = ("Easy", 5, 120)
    MEDIUM = ("Medium", 7, 180)
    HARD = ("Hard", 9, 240)

    def __init__(self, label: str, grid_size: int, time_limit: int) -> None:
        self.label = label
        self.grid_size = grid_size
        self.time_limit = time_limit

    @classmethod
    def from_name(cls, name: str) -> "Difficulty":
        key = name.strip().lower()
        for difficulty in cls:
            if difficulty.label.lower() == key:
                return difficulty
        raise ValueError(f"Unknown difficulty '{name}'")
