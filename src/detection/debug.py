"""
Detection Debug Utilities

Functions for saving annotated debug images of a mapping and managing debug
output.
"""

from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from src.mapping.document import MappingDocument
from .result import DetectionResult


# Debug settings
DEBUG_DIR = Path("./debug")
MAX_DEBUG_IMAGES = 10

# Confidence thresholds for coloring
HIGH_CONFIDENCE = 0.75
MEDIUM_CONFIDENCE = 0.5

LADDER_COLOR = "lime"
SNAKE_COLOR = "red"
QUAD_COLOR = "blue"


def save_debug_image(
    image: Image.Image,
    mapping: Optional[MappingDocument],
    result: Optional[DetectionResult],
    path: Union[str, Path]
) -> None:
    """
    Save an annotated debug image of a mapping.

    Annotations include:
    - Board quad outline
    - Cell numbers at each square center
    - Ladders (base -> top) and snakes (head -> tail) as arrows
    - Detection confidence summary

    Args:
        image: Original PIL Image
        mapping: Mapping document to draw (can be None)
        result: Detection result for the summary line (can be None)
        path: Output file path
    """
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)

    debug_img = image.convert("RGB")
    draw = ImageDraw.Draw(debug_img)

    try:
        font = ImageFont.truetype("arial.ttf", 12)
        small_font = ImageFont.truetype("arial.ttf", 9)
    except OSError:
        font = ImageFont.load_default()
        small_font = font

    if mapping and len(mapping.corners) == 4:
        outline = [(p.x, p.y) for p in mapping.corners]
        draw.polygon(outline, outline=QUAD_COLOR)
        for label, (x, y) in zip(("BL", "BR", "TR", "TL"), outline):
            draw.text((x + 3, y - 12), label, fill=QUAD_COLOR, font=font)

    if mapping and mapping.centers:
        positions = {c.cell: (c.x, c.y) for c in mapping.centers}
        for cell, (x, y) in positions.items():
            draw.text((x - 6, y - 5), str(cell), fill="black", font=small_font)

        for transitions, color in ((mapping.ladders, LADDER_COLOR), (mapping.snakes, SNAKE_COLOR)):
            for source, target in transitions.items():
                if source not in positions or target not in positions:
                    continue
                start = positions[source]
                end = positions[target]
                draw.line([start, end], fill=color, width=3)
                draw.ellipse([end[0] - 4, end[1] - 4, end[0] + 4, end[1] + 4], fill=color)

    if result is not None:
        summary = f"{result.message} Confidence: {result.confidence * 100:.0f}%, " \
                  f"Boundary: {result.boundary_confidence * 100:.0f}%, " \
                  f"Components: {len(result.components)}, Time: {result.processing_time_ms:.1f}ms"
        draw.text((10, 10), summary, fill=get_confidence_color(result.confidence), font=font)

    debug_img.save(str(path), "PNG")

    _cleanup_debug_images()


def _cleanup_debug_images() -> None:
    """Remove old debug images, keeping only the most recent MAX_DEBUG_IMAGES."""
    if not DEBUG_DIR.exists():
        return

    debug_files = sorted(
        DEBUG_DIR.glob("debug_*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True
    )

    for old_file in debug_files[MAX_DEBUG_IMAGES:]:
        try:
            old_file.unlink()
        except OSError:
            pass


def get_confidence_color(confidence: float) -> str:
    """
    Get color code for confidence level.

    Args:
        confidence: Confidence value 0.0-1.0

    Returns:
        Hex color code string
    """
    if confidence >= HIGH_CONFIDENCE:
        return "#4CAF50"  # Green
    elif confidence >= MEDIUM_CONFIDENCE:
        return "#FFC107"  # Yellow
    else:
        return "#d32f2f"  # Red
