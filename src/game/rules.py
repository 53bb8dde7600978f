"""
Move Rules Module - Dice roll resolution for one player.
"""

from dataclasses import dataclass
from enum import Enum

from src.mapping.board import FIRST_CELL, LAST_CELL
from .config import BoardConfig

START_CELL = FIRST_CELL
END_CELL = LAST_CELL


class MoveEvent(str, Enum):
    """What happened on a move."""
    NONE = "none"      # Player had already finished
    MOVE = "move"      # Plain move (or overshoot, stayed put)
    LADDER = "ladder"
    SNAKE = "snake"
    WIN = "win"


@dataclass(frozen=True)
class MoveResult:
    """
    Outcome of applying a roll.

    Attributes:
        final_cell: Cell after snakes/ladders
        intermediate_cell: Cell landed on before snakes/ladders
        event: What happened
    """
    final_cell: int
    intermediate_cell: int
    event: MoveEvent


def apply_roll(config: BoardConfig, cell: int, roll: int) -> MoveResult:
    """
    Move a player and resolve snakes and ladders.

    The last cell must be reached exactly; an overshooting roll leaves the
    player where they are.

    Args:
        config: Board transitions
        cell: Current cell
        roll: Dice value

    Returns:
        MoveResult
    """
    if cell == END_CELL:
        return MoveResult(END_CELL, END_CELL, MoveEvent.NONE)

    intermediate = cell + roll
    if intermediate > END_CELL:
        intermediate = cell

    resolved = config.resolve(intermediate)

    if resolved > intermediate and config.is_ladder(intermediate):
        event = MoveEvent.LADDER
    elif resolved < intermediate and config.is_snake(intermediate):
        event = MoveEvent.SNAKE
    elif resolved == END_CELL:
        event = MoveEvent.WIN
    else:
        event = MoveEvent.MOVE

    return MoveResult(resolved, intermediate, event)
