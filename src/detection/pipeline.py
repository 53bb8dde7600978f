"""
Auto-Detection Pipeline

Best-effort, fully automatic alternative to manual calibration. Infers the
board corners, square centers and snake/ladder transitions from a board
image. Never raises: hard failures come back as a DetectionResult with
success=False and confidence 0; weak detections are still success=True with
an advisory message and the caller decides whether to accept them.

Runs synchronously to completion. There is no cancellation; callers guard
against re-entry.
"""

import logging
import time
from typing import Callable, Optional

from src.mapping.bilinear import BilinearMap
from src.mapping.centers import build_square_centers
from src.mapping.document import MappingDocument, utc_timestamp
from .classify import (
    LOW_CONFIDENCE_THRESHOLD,
    classify_components,
    dedupe_transitions,
    score_confidence,
)
from .image_ops import (
    CROP_SIZE,
    ImageLoadError,
    ImageSource,
    color_masks,
    component_stats,
    edge_profiles,
    find_board_corners,
    find_components,
    is_plausible,
    load_image,
    luminance,
    morph_open,
    warp_to_square,
)
from .result import DetectionResult

logger = logging.getLogger(__name__)

AUTO_NOTE = "Auto-generated mapping from board image"

ProgressCallback = Callable[[str], None]


def _notify(callback: Optional[ProgressCallback], message: str) -> None:
    """Send a progress message; callback errors never abort detection."""
    logger.debug(message)
    if callback is None:
        return
    try:
        callback(message)
    except Exception as e:
        logger.warning(f"Progress callback failed: {e}")


def _describe_source(source: ImageSource) -> str:
    if isinstance(source, str) or hasattr(source, "__fspath__"):
        return str(source)
    return f"<{type(source).__name__}>"


def auto_detect_mapping(
    source: ImageSource,
    progress_callback: Optional[ProgressCallback] = None,
    crop_size: int = CROP_SIZE
) -> DetectionResult:
    """
    Run the full detection pipeline on a board image.

    Args:
        source: File path, http(s) URL, PIL Image or RGB array
        progress_callback: Optional callable receiving stage messages
        crop_size: Resolution of the normalized analysis crop

    Returns:
        DetectionResult with the generated mapping document
    """
    start_time = time.perf_counter()
    source_name = _describe_source(source)

    try:
        _notify(progress_callback, "Loading image...")
        rgb = load_image(source)
        height, width = rgb.shape[:2]

        _notify(progress_callback, "Detecting board boundaries...")
        edge_x, edge_y = edge_profiles(luminance(rgb))
        corners, boundary_confidence = find_board_corners(edge_x, edge_y)

        _notify(progress_callback, "Estimating 10x10 centers...")
        mapping = BilinearMap.from_corners(corners)
        centers = build_square_centers(corners, width, height)

        _notify(progress_callback, "Color thresholding for snakes/ladders...")
        crop = warp_to_square(rgb, mapping, crop_size)
        masks = color_masks(crop)

        _notify(progress_callback, "Analyzing connected components...")
        components = []
        for color, mask in masks.items():
            opened = morph_open(mask)
            for pixels in find_components(opened):
                stats = component_stats(pixels, color)
                if is_plausible(stats):
                    components.append(stats)
        logger.debug(f"{len(components)} plausible components")

        ladder_candidates, snake_candidates, component_confidence = classify_components(
            components, mapping, centers, crop_size
        )
        ladders = dedupe_transitions(ladder_candidates, ascending=True)
        snakes = dedupe_transitions(snake_candidates, ascending=False)

        document = MappingDocument(
            meta={
                "note": AUTO_NOTE,
                "source": source_name,
                "updatedAt": utc_timestamp(),
                "boundaryConfidence": boundary_confidence,
            },
            corners=list(corners),
            centers=centers,
            ladders=ladders,
            snakes=snakes,
        )

        confidence = score_confidence(
            boundary_confidence, component_confidence, len(ladders) + len(snakes)
        )

    except ImageLoadError as e:
        logger.error(str(e))
        return DetectionResult.failure(
            f"Auto-detect failed: {e}",
            processing_time_ms=(time.perf_counter() - start_time) * 1000
        )
    except Exception as e:
        logger.exception(f"Auto-detect failed on {source_name}")
        return DetectionResult.failure(
            f"Auto-detect failed: {e}",
            processing_time_ms=(time.perf_counter() - start_time) * 1000
        )

    if confidence < LOW_CONFIDENCE_THRESHOLD:
        message = "Low confidence. You may want to refine using Mapping Mode."
    else:
        message = "Auto-detection completed."

    processing_time = (time.perf_counter() - start_time) * 1000
    logger.info(f"Auto-detect {source_name}: {len(ladders)} ladders, {len(snakes)} snakes, "
                f"confidence {confidence:.2f} ({processing_time:.1f}ms)")

    return DetectionResult(
        success=True,
        confidence=confidence,
        message=message,
        mapping=document,
        boundary_confidence=boundary_confidence,
        components=components,
        processing_time_ms=processing_time,
        image=rgb
    )
