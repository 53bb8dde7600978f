"""
Detection Module for Snakes & Ladders

Best-effort automatic mapping extraction from a board image.

Usage:
    from src.detection import auto_detect_mapping

    result = auto_detect_mapping("assets/board-default.jpg")
    if result.success and result.confidence >= 0.5:
        mapping = result.mapping
    else:
        print(result.message)  # fall back to manual calibration
"""

# Public API - Result types
from .result import (
    Component,
    DetectionResult,
)

# Public API - Pipeline
from .pipeline import auto_detect_mapping

# Pipeline stages, exposed for tools and tests
from .image_ops import (
    CROP_SIZE,
    ImageLoadError,
    load_image,
    luminance,
    edge_profiles,
    find_board_corners,
    warp_to_square,
    color_masks,
    morph_open,
    find_components,
    component_stats,
    is_plausible,
)
from .classify import (
    LOW_CONFIDENCE_THRESHOLD,
    classify_components,
    dedupe_transitions,
    score_confidence,
)

# Debug utilities
from .debug import DEBUG_DIR, save_debug_image

__all__ = [
    # Result types
    "Component",
    "DetectionResult",
    # Pipeline
    "auto_detect_mapping",
    # Stages
    "CROP_SIZE",
    "ImageLoadError",
    "load_image",
    "luminance",
    "edge_profiles",
    "find_board_corners",
    "warp_to_square",
    "color_masks",
    "morph_open",
    "find_components",
    "component_stats",
    "is_plausible",
    "LOW_CONFIDENCE_THRESHOLD",
    "classify_components",
    "dedupe_transitions",
    "score_confidence",
    # Debug
    "DEBUG_DIR",
    "save_debug_image",
]
