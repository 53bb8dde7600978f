"""
Square Center Module - Pixel centers for the 100 logical cells.

Centers are regenerated wholesale from the corner quad whenever the corners
change; the table is never partially updated.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .bilinear import BilinearMap, DETERMINANT_EPSILON
from .board import BOARD_COLS, BOARD_ROWS, cell_from_row_col

logger = logging.getLogger(__name__)


# Secondary refinement parameters
REFINE_MAX_ITERATIONS = 10
REFINE_TOLERANCE = 1e-3
REFINE_GRADIENT_STEP = 1e-3


@dataclass(frozen=True)
class SquareCenter:
    """Pixel and normalized center of one logical cell."""
    cell: int
    x: float
    y: float
    u: float
    v: float


def cell_uv(row: int, col: int) -> Tuple[float, float]:
    """
    Normalized center of a grid square.

    v is measured from the bottom edge of the quad, so top-based row 9
    (cells 1-10) sits at v = 0.05.
    """
    u = (col + 0.5) / BOARD_COLS
    v = ((BOARD_ROWS - 1 - row) + 0.5) / BOARD_ROWS
    return u, v


def _refine_center(mapping: BilinearMap, u: float, v: float) -> Tuple[float, float]:
    """
    Find the pixel whose inverse-mapped (u, v) matches the target.

    Starts at the forward-map estimate and refines it with Newton steps on a
    finite-difference Jacobian of the inverse map.
    """
    x, y = mapping.forward(u, v)
    eps = REFINE_GRADIENT_STEP

    for _ in range(REFINE_MAX_ITERATIONS):
        mapped = mapping.inverse(x, y)
        du = mapped.u - u
        dv = mapped.v - v

        right = mapping.inverse(x + eps, y)
        down = mapping.inverse(x, y + eps)
        gux = (right.u - mapped.u) / eps
        guy = (down.u - mapped.u) / eps
        gvx = (right.v - mapped.v) / eps
        gvy = (down.v - mapped.v) / eps

        det = gux * gvy - guy * gvx
        if abs(det) < DETERMINANT_EPSILON:
            det = DETERMINANT_EPSILON

        dx = (du * gvy - dv * guy) / det
        dy = (dv * gux - du * gvx) / det
        x -= dx
        y -= dy
        if abs(dx) + abs(dy) < REFINE_TOLERANCE:
            break

    return x, y


def build_square_centers(
    corners: Sequence[Tuple[float, float]],
    width: Optional[float] = None,
    height: Optional[float] = None
) -> List[SquareCenter]:
    """
    Compute the pixel center of every cell from the board corners.

    Args:
        corners: Four (x, y) points in BL, BR, TR, TL order
        width: Width of the image the corners were taken from (informational)
        height: Height of the image the corners were taken from (informational)

    Returns:
        100 SquareCenter records in row-major (row, col) order,
        or an empty list if the quad is incomplete
    """
    if not corners or len(corners) != 4:
        logger.warning(f"Cannot build centers from {len(corners) if corners else 0} corners")
        return []

    mapping = BilinearMap.from_corners(corners)
    centers: List[SquareCenter] = []

    for row in range(BOARD_ROWS):
        for col in range(BOARD_COLS):
            u, v = cell_uv(row, col)
            x, y = _refine_center(mapping, u, v)
            centers.append(SquareCenter(
                cell=cell_from_row_col(row, col),
                x=x,
                y=y,
                u=u,
                v=v
            ))

    logger.debug(f"Built {len(centers)} square centers for image size {width}x{height}")
    return centers


def nearest_cell(x: float, y: float, centers: Sequence[SquareCenter]) -> Optional[int]:
    """
    Find the cell whose center is closest to a pixel.

    Ties keep the first center in iteration order.

    Args:
        x: Pixel x
        y: Pixel y
        centers: Square center table

    Returns:
        Cell number, or None if the table is empty
    """
    if not centers:
        return None

    best = centers[0]
    best_d2 = (x - best.x) ** 2 + (y - best.y) ** 2
    for center in centers[1:]:
        d2 = (x - center.x) ** 2 + (y - center.y) ** 2
        if d2 < best_d2:
            best_d2 = d2
            best = center
    return best.cell
