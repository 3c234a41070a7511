import random

from esper import World

from triplejoy.components.difficulty import Difficulty
from triplejoy.components.game_state import GameState
from triplejoy.components.selection import Selection
from triplejoy.factories.board import create_board, fill_playable_board


def create_world(
    difficulty: Difficulty = Difficulty.EASY,
    *,
    rng: random.Random | None = None,
    playable: bool = True,
) -> World:
    """Build a world in SETUP: state entity, board entity and one entity per cell.

    ``playable=False`` leaves every cell on a placeholder gem so callers can
    load a hand-made layout.
    """
    world = World()
    setattr(world, "random", rng or random.Random())

    # Register the session state resource.
    world.create_entity(
        GameState(difficulty=difficulty, time_remaining=difficulty.time_limit),
        Selection(),
    )

    create_board(world, difficulty.grid_size)
    if playable:
        fill_playable_board(world, world.random)
    return world
