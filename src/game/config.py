"""
Board Configuration Module - Snake and ladder transitions for one game.

A BoardConfig is constructed explicitly and passed into game logic, so
independent games can run side by side with different mappings.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

from src.mapping.document import MappingDocument

logger = logging.getLogger(__name__)


# Classic layout matching the default board image
# ladders: base cell -> top cell (base < top)
DEFAULT_LADDERS: Dict[int, int] = {
    2: 38,
    4: 14,
    8: 31,
    21: 42,
    28: 84,
    36: 44,
    51: 67,
    71: 91,
    80: 100,
}

# snakes: head cell -> tail cell (head > tail)
DEFAULT_SNAKES: Dict[int, int] = {
    16: 6,
    47: 26,
    49: 11,
    56: 53,
    62: 19,
    64: 60,
    87: 24,
    93: 73,
    95: 75,
    98: 78,
}


@dataclass(frozen=True)
class BoardConfig:
    """
    Transition tables for a board.

    Attributes:
        ladders: base cell -> top cell
        snakes: head cell -> tail cell
    """
    ladders: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_LADDERS))
    snakes: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_SNAKES))

    @classmethod
    def default(cls) -> 'BoardConfig':
        """Classic layout for the default board image."""
        return cls()

    @classmethod
    def from_mapping(cls, mapping: MappingDocument) -> 'BoardConfig':
        """
        Build a config from a calibrated mapping.

        A mapping without any transitions leaves the defaults in place.

        Args:
            mapping: Mapping document

        Returns:
            BoardConfig instance
        """
        if not mapping.ladders and not mapping.snakes:
            logger.warning("Mapping has no snakes or ladders, using default layout")
            return cls.default()
        logger.info(f"Using mapped layout: {len(mapping.ladders)} ladders, {len(mapping.snakes)} snakes")
        return cls(ladders=dict(mapping.ladders), snakes=dict(mapping.snakes))

    def resolve(self, cell: int) -> int:
        """Apply a snake or ladder at cell, if any."""
        if cell in self.snakes:
            return self.snakes[cell]
        if cell in self.ladders:
            return self.ladders[cell]
        return cell

    def is_ladder(self, cell: int) -> bool:
        return cell in self.ladders

    def is_snake(self, cell: int) -> bool:
        return cell in self.snakes
