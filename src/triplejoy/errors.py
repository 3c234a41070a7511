"""Engine exception hierarchy.

Contract violations by the host raise ``PreconditionError`` subclasses.
Expected no-ops and terminal game outcomes are never raised.
"""


class EngineError(Exception):
    """Base class for every error raised by the engine."""


class PreconditionError(EngineError, ValueError):
    """The caller broke an operation's contract."""


class PositionOutOfBoundsError(PreconditionError, IndexError):
    def __init__(self, position, size: int):
        self.position = position
        self.size = size
        super().__init__(f"Position {position} is outside a {size}x{size} board")


class NotAdjacentError(PreconditionError):
    def __init__(self, a, b):
        self.a = a
        self.b = b
        super().__init__(f"Positions {a} and {b} are not adjacent")


class InvalidPhaseError(PreconditionError):
    def __init__(self, operation: str, phase):
        self.operation = operation
        self.phase = phase
        super().__init__(f"Cannot {operation} while session is {phase.name}")


class BoardGenerationError(EngineError, RuntimeError):
    """Board generation exceeded its retry cap."""


class CascadeLimitError(EngineError, RuntimeError):
    """A single resolution exceeded the cascade depth cap."""
