"""Game state resource describing the running session."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from triplejoy.components.difficulty import Difficulty


class SessionPhase(Enum):
    """Session lifecycle: SETUP -> ACTIVE <-> PAUSED -> ENDED."""
    SETUP = auto()
    ACTIVE = auto()
    PAUSED = auto()
    ENDED = auto()


class EndReason(Enum):
    TIMEOUT = "timeout"
    NO_MOVES = "no-moves"


@dataclass
class GameState:
    """Singleton component storing score, timer and lifecycle flags."""
    difficulty: Difficulty = Difficulty.EASY
    score: int = 0
    time_remaining: int = 0
    level: int = 1
    phase: SessionPhase = SessionPhase.SETUP
    end_reason: Optional[EndReason] = None
    elapsed: int = 0
    pause_count: int = 0
    busy: bool = False

    @property
    def is_active(self) -> bool:
        return self.phase in (SessionPhase.ACTIVE, SessionPhase.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self.phase is SessionPhase.PAUSED
