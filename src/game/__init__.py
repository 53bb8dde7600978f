"""
Game Package - Snakes & Ladders rules, AI opponent and turn logic.

Public API:
    - BoardConfig: Explicit snake/ladder transition tables
    - apply_roll(): Resolve one dice roll for a player
    - MoveResult, MoveEvent: Roll outcomes
    - roll_dice(), choose_taunt(), ai_take_turn(): Rule-based AI
    - GameSession: Human vs AI turn state machine

Usage:
    from src.game import BoardConfig, GameSession

    config = BoardConfig.from_mapping(mapping)  # or BoardConfig.default()
    session = GameSession(config)
    session.human_roll()
    session.ai_turn()
"""

from .config import BoardConfig, DEFAULT_LADDERS, DEFAULT_SNAKES
from .rules import START_CELL, END_CELL, MoveEvent, MoveResult, apply_roll
from .ai import AITurn, TauntContext, roll_dice, choose_taunt, ai_take_turn
from .session import Player, ChatMessage, GameSession

__all__ = [
    # Configuration
    "BoardConfig",
    "DEFAULT_LADDERS",
    "DEFAULT_SNAKES",
    # Rules
    "START_CELL",
    "END_CELL",
    "MoveEvent",
    "MoveResult",
    "apply_roll",
    # AI
    "AITurn",
    "TauntContext",
    "roll_dice",
    "choose_taunt",
    "ai_take_turn",
    # Session
    "Player",
    "ChatMessage",
    "GameSession",
]
