"""
Bilinear Mapping Module - Quad-to-unit-square coordinate mapping.

The board region is modelled as a bilinear quadrilateral rather than a full
projective homography:

    x = a0 + a1*u + a2*v + a3*u*v
    y = b0 + b1*u + b2*v + b3*u*v

(u, v) are normalized board coordinates in [0, 1]^2 with (0, 0) at the
bottom-left corner and (1, 1) at the top-right corner. Corners are always
supplied in the order bottom-left, bottom-right, top-right, top-left and are
never reordered; a wrong order produces a wrong (but valid) mapping.

The forward map is evaluated directly. The inverse has no closed form and is
solved by Newton-Raphson iteration on the analytic Jacobian.
"""

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple

import numpy as np


# Newton inversion parameters
INVERSE_MAX_ITERATIONS = 20
INVERSE_TOLERANCE = 1e-6
DETERMINANT_EPSILON = 1e-12

# Unit-square parameters of each corner, in BL, BR, TR, TL order
CORNER_UV: Tuple[Tuple[float, float], ...] = (
    (0.0, 0.0),
    (1.0, 0.0),
    (1.0, 1.0),
    (0.0, 1.0),
)


class Point(NamedTuple):
    """Pixel-space point (x grows right, y grows down)."""
    x: float
    y: float


class NewtonState(NamedTuple):
    """Current (u, v) guess of an inverse-mapping Newton iteration."""
    u: float
    v: float


# Starting guess for every inverse solve (center of the quad)
NEWTON_START = NewtonState(0.5, 0.5)


def solve_coefficients(corners: Sequence[Tuple[float, float]]) -> Tuple[float, ...]:
    """
    Solve the 8x8 linear system for the bilinear coefficients.

    Args:
        corners: Four (x, y) pixel points in BL, BR, TR, TL order

    Returns:
        Tuple (a0, a1, a2, a3, b0, b1, b2, b3)

    Raises:
        ValueError: If exactly four corners are not supplied
    """
    if len(corners) != 4:
        raise ValueError(f"Expected 4 corners, got {len(corners)}")

    system = np.zeros((8, 8), dtype=np.float64)
    rhs = np.zeros(8, dtype=np.float64)

    for i, ((u, v), (x, y)) in enumerate(zip(CORNER_UV, corners)):
        terms = (1.0, u, v, u * v)
        system[i, 0:4] = terms
        system[i + 4, 4:8] = terms
        rhs[i] = x
        rhs[i + 4] = y

    coefficients = np.linalg.solve(system, rhs)
    return tuple(float(c) for c in coefficients)


def newton_step(
    coefficients: Sequence[float],
    state: NewtonState,
    x: float,
    y: float
) -> Tuple[NewtonState, float]:
    """
    Perform one Newton-Raphson step of the inverse mapping.

    A near-singular Jacobian has its determinant replaced by a small epsilon
    instead of raising, trading accuracy for robustness.

    Args:
        coefficients: Bilinear coefficients (a0..a3, b0..b3)
        state: Current (u, v) guess
        x: Target pixel x
        y: Target pixel y

    Returns:
        Tuple of (next state, combined step size |du| + |dv|)
    """
    a0, a1, a2, a3, b0, b1, b2, b3 = coefficients
    u, v = state

    fx = a0 + a1 * u + a2 * v + a3 * u * v - x
    fy = b0 + b1 * u + b2 * v + b3 * u * v - y

    j11 = a1 + a3 * v
    j12 = a2 + a3 * u
    j21 = b1 + b3 * v
    j22 = b2 + b3 * u

    det = j11 * j22 - j12 * j21
    if abs(det) < DETERMINANT_EPSILON:
        det = DETERMINANT_EPSILON

    du = (fx * j22 - fy * j12) / det
    dv = (fy * j11 - fx * j21) / det

    return NewtonState(u - du, v - dv), abs(du) + abs(dv)


@dataclass(frozen=True)
class BilinearMap:
    """
    Bilinear mapping between the unit square and a pixel-space quad.

    Attributes:
        coefficients: (a0, a1, a2, a3, b0, b1, b2, b3)
        corners: The four source corners in BL, BR, TR, TL order
    """
    coefficients: Tuple[float, ...]
    corners: Tuple[Point, ...]

    @classmethod
    def from_corners(cls, corners: Sequence[Tuple[float, float]]) -> 'BilinearMap':
        """
        Build a mapping from four ordered corners.

        Args:
            corners: Four (x, y) pixel points in BL, BR, TR, TL order

        Returns:
            BilinearMap instance

        Raises:
            ValueError: If exactly four corners are not supplied
        """
        coefficients = solve_coefficients(corners)
        points = tuple(Point(float(x), float(y)) for x, y in corners)
        return cls(coefficients=coefficients, corners=points)

    def forward(self, u: float, v: float) -> Point:
        """Map normalized (u, v) to pixel (x, y)."""
        a0, a1, a2, a3, b0, b1, b2, b3 = self.coefficients
        return Point(
            a0 + a1 * u + a2 * v + a3 * u * v,
            b0 + b1 * u + b2 * v + b3 * u * v,
        )

    def forward_grid(self, u: np.ndarray, v: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Vectorized forward map over arrays of (u, v)."""
        a0, a1, a2, a3, b0, b1, b2, b3 = self.coefficients
        uv = u * v
        return a0 + a1 * u + a2 * v + a3 * uv, b0 + b1 * u + b2 * v + b3 * uv

    def inverse(self, x: float, y: float) -> NewtonState:
        """
        Map pixel (x, y) to normalized (u, v) by Newton iteration.

        Converges for points inside a non-degenerate quad. For degenerate
        quads the result after the iteration cap is returned as-is.

        Args:
            x: Pixel x
            y: Pixel y

        Returns:
            NewtonState with the recovered (u, v)
        """
        state = NEWTON_START
        for _ in range(INVERSE_MAX_ITERATIONS):
            state, step = newton_step(self.coefficients, state, x, y)
            if step < INVERSE_TOLERANCE:
                break
        return state
