"""
Game Session Module - Human vs AI turn state machine.

State Flow:
    HUMAN --roll--> AI --ai_turn--> HUMAN ...
      |                 |
      +---- reached 100 (winner set, further rolls ignored)

Visual pacing delays belong to the front-end and are not modelled here.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .ai import HUMAN_LADDER, HUMAN_SNAKE, HUMAN_WIN, TauntContext, ai_take_turn, choose_taunt, roll_dice
from .config import BoardConfig
from .rules import END_CELL, START_CELL, MoveEvent, MoveResult, apply_roll

logger = logging.getLogger(__name__)


__all__ = [
    "Player",
    "ChatMessage",
    "GameSession",
]


class Player(str, Enum):
    """Whose turn it is."""
    HUMAN = "HUMAN"
    AI = "AI"


SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class ChatMessage:
    """One line of the game chat log."""
    id: str
    sender: str  # "SYSTEM", "AI" or "HUMAN"
    text: str


class GameSession:
    """
    One human-vs-AI game on a given board configuration.

    Example:
        session = GameSession(BoardConfig.from_mapping(mapping), rng=random.Random(7))
        while session.winner is None:
            session.human_roll()
            session.ai_turn()
    """

    def __init__(self, config: Optional[BoardConfig] = None, rng: Optional[random.Random] = None):
        """
        Initialize a game.

        Args:
            config: Board transitions (default layout if None)
            rng: Random source for dice and taunts
        """
        self.config = config or BoardConfig.default()
        self.rng = rng or random.Random()
        self.new_game(intro=True)

    def new_game(self, intro: bool = False) -> None:
        """Reset both players to the start cell with a fresh chat log."""
        self.human_cell = START_CELL
        self.ai_cell = START_CELL
        self.current_turn = Player.HUMAN
        self.last_roll: Optional[int] = None
        self.winner: Optional[Player] = None
        self.messages: List[ChatMessage] = []
        self._next_id = 0
        if intro:
            self._add(SYSTEM, "Welcome to Snakes & Ladders!")
            self._add(Player.AI.value, "I'm ready to win. Try to keep up.")
        else:
            self._add(SYSTEM, "New game started!")
            self._add(Player.AI.value, "Fresh board, same outcome: I win.")
        logger.debug("New game")

    def _add(self, sender: str, text: str) -> None:
        self.messages.append(ChatMessage(id=f"m{self._next_id}", sender=sender, text=text))
        self._next_id += 1

    def _move(self, cell: int, roll: int) -> MoveResult:
        return apply_roll(self.config, cell, roll)

    def roll(self) -> Optional[MoveResult]:
        """Play the turn of whoever is due to move."""
        if self.current_turn == Player.HUMAN:
            return self.human_roll()
        return self.ai_turn()

    def human_roll(self, roll: Optional[int] = None) -> Optional[MoveResult]:
        """
        Play the human's turn.

        Args:
            roll: Dice value to use (rolled if None)

        Returns:
            MoveResult, or None if it is not the human's turn

        Raises:
            ValueError: If a supplied roll is not a dice value 1-6
        """
        if roll is not None and not 1 <= roll <= 6:
            raise ValueError(f"Dice roll must be 1-6, got {roll}")

        if self.winner is not None or self.current_turn != Player.HUMAN:
            logger.debug(f"Human roll ignored (turn={self.current_turn.value}, winner={self.winner})")
            return None

        roll = roll if roll is not None else roll_dice(self.rng)
        self.last_roll = roll
        result = self._move(self.human_cell, roll)
        self.human_cell = result.final_cell
        logger.info(f"Human rolled {roll}: {result.intermediate_cell} -> {result.final_cell} ({result.event.value})")

        if result.event == MoveEvent.LADDER:
            self._add(SYSTEM, f"You climbed a ladder from {result.intermediate_cell} to {result.final_cell}!")
            self._add(Player.AI.value, choose_taunt(TauntContext(event_type=HUMAN_LADDER), self.rng))
        elif result.event == MoveEvent.SNAKE:
            self._add(SYSTEM, f"Oh no! You slid down a snake from {result.intermediate_cell} to {result.final_cell}.")
            self._add(Player.AI.value, choose_taunt(TauntContext(event_type=HUMAN_SNAKE), self.rng))

        if result.final_cell == END_CELL:
            self.winner = Player.HUMAN
            self._add(SYSTEM, "You reached 100! You win!")
            self._add(Player.AI.value, choose_taunt(TauntContext(event_type=HUMAN_WIN), self.rng))
            return result

        self.current_turn = Player.AI
        return result

    def ai_turn(self) -> Optional[MoveResult]:
        """
        Play the AI's turn.

        Returns:
            MoveResult, or None if it is not the AI's turn
        """
        if self.winner is not None or self.current_turn != Player.AI:
            logger.debug(f"AI turn ignored (turn={self.current_turn.value}, winner={self.winner})")
            return None

        previous = self.ai_cell
        turn = ai_take_turn(previous, lambda roll: self._move(previous, roll), self.rng)
        result = turn.result
        self.last_roll = turn.roll
        self.ai_cell = result.final_cell
        logger.info(f"AI rolled {turn.roll}: {result.intermediate_cell} -> {result.final_cell} ({result.event.value})")

        event = result.event.value if result.event in (MoveEvent.LADDER, MoveEvent.SNAKE) else "neutral"
        self._add(Player.AI.value, choose_taunt(TauntContext(
            ai_cell=previous,
            human_cell=self.human_cell,
            last_roll=turn.roll,
            moved_to=result.final_cell,
            event_type=event
        ), self.rng))

        if result.final_cell == END_CELL:
            self.winner = Player.AI
            self._add(SYSTEM, "AI reached 100 and wins!")
            self._add(Player.AI.value, choose_taunt(TauntContext(event_type=MoveEvent.WIN.value), self.rng))
            return result

        self.current_turn = Player.HUMAN
        return result
