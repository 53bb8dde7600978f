"""
Board Indexing Module - Boustrophedon numbering for the 10x10 board.

Rows are top-based (row 0 is the top row), columns are left-based.
Cell 1 is the bottom-left square; the path runs left to right along the
bottom row and reverses direction on every row above it.
"""

from typing import Tuple

# Board dimensions (10 columns x 10 rows)
BOARD_ROWS = 10
BOARD_COLS = 10

FIRST_CELL = 1
LAST_CELL = BOARD_ROWS * BOARD_COLS  # 100


def cell_from_row_col(row: int, col: int) -> int:
    """
    Convert a grid coordinate to its cell number.

    Args:
        row: Top-based row index (0-9)
        col: Left-based column index (0-9)

    Returns:
        Cell number 1-100
    """
    bottom_row = (BOARD_ROWS - 1) - row
    if bottom_row % 2 == 0:
        in_row = col
    else:
        in_row = (BOARD_COLS - 1) - col
    return bottom_row * BOARD_COLS + in_row + 1


def row_col_from_cell(cell: int) -> Tuple[int, int]:
    """
    Convert a cell number to its grid coordinate.

    Out-of-range cells are clamped to 1-100 rather than rejected.

    Args:
        cell: Cell number

    Returns:
        (row, col) tuple, top-based row and left-based column
    """
    cell = min(LAST_CELL, max(FIRST_CELL, cell))
    zero = cell - 1
    bottom_row = zero // BOARD_COLS
    in_row = zero % BOARD_COLS
    row = (BOARD_ROWS - 1) - bottom_row
    if bottom_row % 2 == 0:
        col = in_row
    else:
        col = (BOARD_COLS - 1) - in_row
    return row, col
