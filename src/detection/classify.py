"""
Component Classification Module

Turns plausible colour components into snake/ladder transitions and scores
the overall detection.
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from src.mapping.bilinear import BilinearMap
from src.mapping.centers import SquareCenter, nearest_cell
from .result import Component

logger = logging.getLogger(__name__)


# Minimum cell-number span for a component to count as a transition
MIN_CELL_SPAN = 3

# Confidence added per accepted candidate
COMPONENT_CONFIDENCE_STEP = 0.03

# Transition count that saturates the count score
EXPECTED_TRANSITIONS = 12

# Below this overall confidence the caller is advised to calibrate manually
LOW_CONFIDENCE_THRESHOLD = 0.5

Candidate = Tuple[int, int]  # (source cell, target cell)


def crop_point_to_cell(
    px: float,
    py: float,
    mapping: BilinearMap,
    centers: Sequence[SquareCenter],
    crop_size: int
) -> int:
    """
    Map a point of the normalized crop to the nearest board cell.

    Args:
        px: Crop x
        py: Crop y
        mapping: Board mapping the crop was sampled with
        centers: Square center table
        crop_size: Crop resolution

    Returns:
        Cell number (1 if the center table is empty)
    """
    u = px / (crop_size - 1)
    v = py / (crop_size - 1)
    x, y = mapping.forward(u, v)
    cell = nearest_cell(x, y, centers)
    return cell if cell is not None else 1


def classify_components(
    components: Iterable[Component],
    mapping: BilinearMap,
    centers: Sequence[SquareCenter],
    crop_size: int
) -> Tuple[List[Candidate], List[Candidate], float]:
    """
    Classify components as ladders or snakes by endpoint cells.

    The lower-y extremal point gives the start cell and the higher-y point
    the end cell. An end at least MIN_CELL_SPAN above the start is a ladder
    (base=start, top=end); at least MIN_CELL_SPAN below is a snake
    (head=start, tail=end). Shorter spans are discarded as noise.

    Endpoint pairing assumes the art has a clear vertical extent; diagonal
    or curled art can pair the wrong points.

    Args:
        components: Plausible components
        mapping: Board mapping
        centers: Square center table
        crop_size: Crop resolution the components were found in

    Returns:
        Tuple of (ladder candidates, snake candidates, component confidence)
    """
    ladders: List[Candidate] = []
    snakes: List[Candidate] = []
    confidence = 0.0

    for component in components:
        start = crop_point_to_cell(*component.min_point, mapping, centers, crop_size)
        end = crop_point_to_cell(*component.max_point, mapping, centers, crop_size)

        if end - start >= MIN_CELL_SPAN:
            ladders.append((start, end))
            confidence += COMPONENT_CONFIDENCE_STEP
            logger.debug(f"Ladder candidate {start} -> {end} ({component.color})")
        elif start - end >= MIN_CELL_SPAN:
            snakes.append((start, end))
            confidence += COMPONENT_CONFIDENCE_STEP
            logger.debug(f"Snake candidate {start} -> {end} ({component.color})")
        else:
            logger.debug(f"Discarded {component.color} component {start} -> {end} (span too small)")

    return ladders, snakes, confidence


def dedupe_transitions(candidates: Iterable[Candidate], ascending: bool) -> Dict[int, int]:
    """
    Reduce candidates to one target per source cell.

    Keeps the target with the largest absolute span (first wins on ties),
    then drops entries pointing the wrong way: ladders must go up
    (target > source), snakes must go down (target < source).

    Args:
        candidates: (source, target) pairs
        ascending: True for ladders, False for snakes

    Returns:
        source -> target dict
    """
    best: Dict[int, int] = {}
    for source, target in candidates:
        if source not in best or abs(target - source) > abs(best[source] - source):
            best[source] = target

    result = {}
    for source, target in best.items():
        if ascending and target <= source:
            logger.debug(f"Dropped ladder {source} -> {target}: top not above base")
            continue
        if not ascending and target >= source:
            logger.debug(f"Dropped snake {source} -> {target}: tail not below head")
            continue
        result[source] = target
    return result


def score_confidence(boundary_confidence: float, component_confidence: float, transition_count: int) -> float:
    """
    Combine boundary and component signals into an overall confidence.

    confidence = 0.4 * boundary + 0.6 * min(1, component + 0.5 * count_score),
    count_score = min(1, transitions / 12), clamped to [0, 1].
    """
    count_score = min(1.0, transition_count / EXPECTED_TRANSITIONS)
    combined = 0.4 * boundary_confidence + 0.6 * min(1.0, component_confidence + count_score * 0.5)
    return max(0.0, min(1.0, combined))
