"""
Render a synthetic Snakes & Ladders board for exercising the auto-detector.

The board is an axis-aligned checkerboard of light neutral squares on a dark
background, with ladders drawn as thick blue strokes and snakes as thick red
strokes between cell centers.

Usage:
    python tools/make_board.py board.png
    python tools/make_board.py board.png --ladder 8:48 --snake 62:19
"""

import sys
import argparse
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.mapping import BOARD_COLS, BOARD_ROWS, row_col_from_cell

BACKGROUND = (40, 40, 40)
LIGHT_SQUARE = (232, 232, 232)
DARK_SQUARE = (205, 205, 205)
LADDER_COLOR = (30, 60, 220)
SNAKE_COLOR = (220, 40, 40)
STROKE_WIDTH = 10


def cell_center(cell: int, board_size: int, margin: int) -> Tuple[float, float]:
    """Pixel center of a cell on the rendered board."""
    row, col = row_col_from_cell(cell)
    square = board_size / BOARD_COLS
    return margin + (col + 0.5) * square, margin + (row + 0.5) * square


def render_board(
    ladders: Optional[Dict[int, int]] = None,
    snakes: Optional[Dict[int, int]] = None,
    board_size: int = 400,
    margin: int = 10
) -> Image.Image:
    """
    Render a board image.

    Args:
        ladders: base -> top cells to draw
        snakes: head -> tail cells to draw
        board_size: Board side in pixels
        margin: Background border around the board

    Returns:
        RGB PIL Image of (board_size + 2*margin) square pixels
    """
    side = board_size + 2 * margin
    image = Image.new("RGB", (side, side), BACKGROUND)
    draw = ImageDraw.Draw(image)
    square = board_size / BOARD_COLS

    for row in range(BOARD_ROWS):
        for col in range(BOARD_COLS):
            x0 = margin + col * square
            y0 = margin + row * square
            color = LIGHT_SQUARE if (row + col) % 2 == 0 else DARK_SQUARE
            draw.rectangle([x0, y0, x0 + square - 1, y0 + square - 1], fill=color)

    for transitions, color in ((ladders or {}, LADDER_COLOR), (snakes or {}, SNAKE_COLOR)):
        for source, target in transitions.items():
            start = cell_center(source, board_size, margin)
            end = cell_center(target, board_size, margin)
            draw.line([start, end], fill=color, width=STROKE_WIDTH)

    return image


def _parse_pairs(values) -> Dict[int, int]:
    pairs = {}
    for value in values or []:
        source, target = value.split(":")
        pairs[int(source)] = int(target)
    return pairs


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Render a synthetic board image")
    parser.add_argument("output", help="Output PNG path")
    parser.add_argument("--ladder", action="append", help="Ladder as BASE:TOP (repeatable)")
    parser.add_argument("--snake", action="append", help="Snake as HEAD:TAIL (repeatable)")
    parser.add_argument("--size", type=int, default=400, help="Board side in pixels")
    args = parser.parse_args()

    ladders = _parse_pairs(args.ladder) or {8: 48}
    snakes = _parse_pairs(args.snake) or {62: 19}

    image = render_board(ladders, snakes, board_size=args.size)
    image.save(args.output)
    print(f"Board saved: {args.output} ({len(ladders)} ladders, {len(snakes)} snakes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
