"""
Simple AI Module - Rule-based opponent and taunt generator.

No lookahead: the AI just rolls. Taunts are picked from the game context.
"""

import random
from dataclasses import dataclass
from typing import Callable, Optional

from .rules import MoveEvent, MoveResult

# Taunt event types beyond MoveEvent values
HUMAN_LADDER = "human_ladder"
HUMAN_SNAKE = "human_snake"
HUMAN_WIN = "human_win"
NEUTRAL = "neutral"

EVENT_TAUNTS = {
    MoveEvent.LADDER.value: "Up I go! That view from the top is nice, isn't it?",
    MoveEvent.SNAKE.value: "Ouch! That snake had attitude. I'll be back though.",
    MoveEvent.WIN.value: "Victory! Better luck next time, human.",
    HUMAN_SNAKE: "Snakes like you today! Rough slide.",
    HUMAN_LADDER: "You got lucky with that ladder. Don't get used to it.",
}

GENERIC_TAUNTS = (
    "Your move, challenger.",
    "Let's keep this rolling.",
    "I sense a ladder... or maybe not.",
    "Slow and steady wins my race.",
)


@dataclass(frozen=True)
class TauntContext:
    """
    Game context for taunt selection.

    Attributes:
        ai_cell: AI cell before its move
        human_cell: Human player's cell
        last_roll: Most recent dice value
        moved_to: AI cell after its move
        event_type: MoveEvent value or one of the human_* / neutral types
    """
    ai_cell: int = 1
    human_cell: int = 1
    last_roll: int = 1
    moved_to: int = 1
    event_type: str = NEUTRAL


@dataclass(frozen=True)
class AITurn:
    """Result of an AI turn."""
    roll: int
    result: MoveResult


def roll_dice(rng: Optional[random.Random] = None) -> int:
    """Roll a six-sided die."""
    return (rng or random).randint(1, 6)


def choose_taunt(context: TauntContext, rng: Optional[random.Random] = None) -> str:
    """
    Pick a taunt for the current game context.

    Event taunts take priority, then lead/deficit, then roll size, then a
    random generic line.

    Args:
        context: Game context
        rng: Optional random source for the generic pick

    Returns:
        Taunt text
    """
    event = context.event_type.value if isinstance(context.event_type, MoveEvent) else context.event_type
    if event in EVENT_TAUNTS:
        return EVENT_TAUNTS[event]

    distance = context.moved_to - context.ai_cell
    lead = context.ai_cell - context.human_cell

    if lead > 15:
        return "I'm miles ahead. Are you even trying?"
    if lead > 5:
        return "Keeping a comfy lead!"
    if lead < -10:
        return "Alright, alright, you're ahead for now..."
    if distance >= 6:
        return f"A roll of {context.last_roll}? Nice boost!"
    if context.last_roll == 6:
        return "Another 6? The dice like me today."

    return (rng or random).choice(GENERIC_TAUNTS)


def ai_take_turn(
    ai_cell: int,
    apply_move: Callable[[int], MoveResult],
    rng: Optional[random.Random] = None
) -> AITurn:
    """
    Roll for the AI and apply the move.

    Args:
        ai_cell: AI's current cell
        apply_move: Callable taking the roll and returning the MoveResult
        rng: Optional random source

    Returns:
        AITurn with the roll and its result
    """
    roll = roll_dice(rng)
    return AITurn(roll=roll, result=apply_move(roll))
