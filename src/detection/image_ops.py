"""
Image Operations for Board Auto-Detection

Pure functions over explicit numpy buffers. Each stage takes the previous
stage's buffer and returns a new one:

    RGB image -> luminance -> edge profiles -> board corners
    RGB image + corners -> normalized crop -> colour masks -> opened masks
    mask -> components -> component statistics
"""

import io
import logging
from pathlib import Path
from typing import Dict, List, Tuple, Union

import cv2
import httpx
import numpy as np
from PIL import Image

from src.mapping.bilinear import BilinearMap, Point
from .result import Component

logger = logging.getLogger(__name__)


# Boundary detection parameters
EDGE_MARGIN_FRACTION = 0.2  # Search the outer 20% of each side for the board edge
FALLBACK_INSET = 0.05       # Inset rectangle used when the detected area is implausible

# (minimum area ratio, boundary confidence) bands, checked in order
AREA_CONFIDENCE_BANDS: Tuple[Tuple[float, float], ...] = (
    (0.4, 0.5),  # Suspiciously large, probably the image border
    (0.2, 0.7),
    (0.1, 0.6),
)
FALLBACK_CONFIDENCE = 0.4

# Normalized crop resolution (20 pixels per cell)
CROP_SIZE = 200

# Colour thresholds (normalized channel ratio, absolute intensity floor)
COLOR_RATIO_THRESHOLD = 0.5
YELLOW_RATIO_THRESHOLD = 0.35
YELLOW_BLUE_CEILING = 0.3
COLOR_INTENSITY_FLOOR = 80
COLOR_NAMES = ("red", "green", "blue", "yellow")

# Morphology / component parameters
MORPH_RADIUS = 1
MIN_COMPONENT_SIZE = 30
MIN_ASPECT = 2.0
MIN_LENGTH = 12.0

# Remote image download timeout (seconds)
HTTP_TIMEOUT = 10.0

ImageSource = Union[str, Path, Image.Image, np.ndarray]


class ImageLoadError(Exception):
    """Raised when the board image cannot be acquired or decoded."""


def load_image(source: ImageSource) -> np.ndarray:
    """
    Load a board image as an RGB uint8 array.

    Args:
        source: File path, http(s) URL, PIL Image or HxWx3 array

    Returns:
        HxWx3 RGB array

    Raises:
        ImageLoadError: If the image cannot be fetched or decoded
    """
    if isinstance(source, np.ndarray):
        if source.ndim != 3 or source.shape[2] < 3:
            raise ImageLoadError(f"Expected HxWx3 array, got shape {source.shape}")
        return np.ascontiguousarray(source[:, :, :3], dtype=np.uint8)

    if isinstance(source, Image.Image):
        return np.array(source.convert("RGB"))

    text = str(source)
    try:
        if text.startswith(("http://", "https://")):
            response = httpx.get(text, timeout=HTTP_TIMEOUT, follow_redirects=True)
            response.raise_for_status()
            image = Image.open(io.BytesIO(response.content))
        else:
            image = Image.open(text)
        image.load()
    except (OSError, httpx.HTTPError) as e:
        raise ImageLoadError(f"Failed to load image: {text} ({e})") from e

    logger.debug(f"Loaded image {text}: {image.size[0]}x{image.size[1]} {image.mode}")
    return np.array(image.convert("RGB"))


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Per-pixel luminance (ITU-R BT.601 weights) as float32."""
    r = rgb[:, :, 0].astype(np.float32)
    g = rgb[:, :, 1].astype(np.float32)
    b = rgb[:, :, 2].astype(np.float32)
    return 0.299 * r + 0.587 * g + 0.114 * b


def edge_profiles(lum: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Accumulate luminance gradients per column and per row.

    edge_x[x] is the sum over all rows of |L[y, x+1] - L[y, x-1]| (vertical
    lines); edge_y[y] is the sum over all columns of |L[y+1, x] - L[y-1, x]|
    (horizontal lines). The outermost column/row of each profile is zero.

    Args:
        lum: HxW luminance buffer

    Returns:
        Tuple of (edge_x of length W, edge_y of length H)
    """
    height, width = lum.shape
    edge_x = np.zeros(width, dtype=np.float64)
    edge_y = np.zeros(height, dtype=np.float64)

    if width > 2:
        edge_x[1:-1] = np.abs(lum[:, 2:] - lum[:, :-2]).sum(axis=0)
    if height > 2:
        edge_y[1:-1] = np.abs(lum[2:, :] - lum[:-2, :]).sum(axis=1)

    return edge_x, edge_y


def arg_max_in_range(values: np.ndarray, start: int, end: int) -> int:
    """Index of the first maximum of values[start..end] (inclusive, clamped)."""
    start = max(0, start)
    end = min(len(values) - 1, end)
    if end < start:
        return start
    return start + int(np.argmax(values[start:end + 1]))


def find_board_corners(edge_x: np.ndarray, edge_y: np.ndarray) -> Tuple[List[Point], float]:
    """
    Guess the board quad from the strongest edge near each image side.

    Coarse heuristic: axis-aligned, no rotation or sub-pixel correction.
    When the bounded area is under 10% of the image a 5%-inset rectangle is
    used instead.

    Args:
        edge_x: Column edge profile (length = image width)
        edge_y: Row edge profile (length = image height)

    Returns:
        Tuple of (corners in BL, BR, TR, TL order, boundary confidence)
    """
    width = len(edge_x)
    height = len(edge_y)

    left = arg_max_in_range(edge_x, 0, int(width * EDGE_MARGIN_FRACTION))
    right = arg_max_in_range(edge_x, int(width * (1 - EDGE_MARGIN_FRACTION)), width - 1)
    top = arg_max_in_range(edge_y, 0, int(height * EDGE_MARGIN_FRACTION))
    bottom = arg_max_in_range(edge_y, int(height * (1 - EDGE_MARGIN_FRACTION)), height - 1)

    area_ratio = abs((right - left) * (bottom - top)) / float(width * height)

    for min_ratio, confidence in AREA_CONFIDENCE_BANDS:
        if area_ratio > min_ratio:
            corners = [
                Point(float(left), float(bottom)),
                Point(float(right), float(bottom)),
                Point(float(right), float(top)),
                Point(float(left), float(top)),
            ]
            logger.debug(f"Board edges L={left} R={right} T={top} B={bottom} "
                         f"(area {area_ratio:.2f}, confidence {confidence})")
            return corners, confidence

    logger.warning(f"Board edges implausible (area {area_ratio:.2f}), using {FALLBACK_INSET:.0%} inset")
    inset = FALLBACK_INSET
    corners = [
        Point(width * inset, height * (1 - inset)),
        Point(width * (1 - inset), height * (1 - inset)),
        Point(width * (1 - inset), height * inset),
        Point(width * inset, height * inset),
    ]
    return corners, FALLBACK_CONFIDENCE


def warp_to_square(rgb: np.ndarray, mapping: BilinearMap, size: int = CROP_SIZE) -> np.ndarray:
    """
    Resample the board quad into a size x size crop.

    Crop pixel (px, py) samples the image at forward(px/(size-1), py/(size-1))
    using the nearest source pixel, so crop row 0 runs along the bottom edge
    of the board (v = 0).

    Args:
        rgb: HxWx3 source image
        mapping: Board mapping
        size: Crop resolution

    Returns:
        size x size x 3 crop
    """
    height, width = rgb.shape[:2]
    steps = np.arange(size, dtype=np.float64) / (size - 1)
    u = steps[np.newaxis, :]
    v = steps[:, np.newaxis]
    xs, ys = mapping.forward_grid(u, v)

    ix = np.clip(np.floor(xs + 0.5), 0, width - 1).astype(np.intp)
    iy = np.clip(np.floor(ys + 0.5), 0, height - 1).astype(np.intp)
    ix, iy = np.broadcast_arrays(ix, iy)
    return rgb[iy, ix]


def color_masks(crop: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Threshold a crop into red/green/blue/yellow binary masks.

    A pixel is assigned to a colour when its normalized channel ratio passes
    the ratio rule and the channel intensity is above the floor. Masks are
    independent; a pixel may appear in more than one.

    Args:
        crop: NxNx3 RGB crop

    Returns:
        Dict of colour name -> uint8 mask (0/1)
    """
    r = crop[:, :, 0].astype(np.float32)
    g = crop[:, :, 1].astype(np.float32)
    b = crop[:, :, 2].astype(np.float32)

    total = r + g + b + 1e-6
    rn = r / total
    gn = g / total
    bn = b / total
    floor = COLOR_INTENSITY_FLOOR

    masks = {
        "red": (rn > COLOR_RATIO_THRESHOLD) & (r > floor),
        "green": (gn > COLOR_RATIO_THRESHOLD) & (g > floor),
        "blue": (bn > COLOR_RATIO_THRESHOLD) & (b > floor),
        "yellow": ((rn > YELLOW_RATIO_THRESHOLD) & (gn > YELLOW_RATIO_THRESHOLD)
                   & (bn < YELLOW_BLUE_CEILING) & (r > floor) & (g > floor)),
    }
    return {name: mask.astype(np.uint8) for name, mask in masks.items()}


def morph_open(mask: np.ndarray, radius: int = MORPH_RADIUS) -> np.ndarray:
    """
    Morphological opening (erode then dilate) with a square element.

    Image borders are replicated, so blobs touching the edge are not eaten
    away from outside.
    """
    kernel = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.uint8)
    eroded = cv2.erode(mask.astype(np.uint8), kernel, borderType=cv2.BORDER_REPLICATE)
    return cv2.dilate(eroded, kernel, borderType=cv2.BORDER_REPLICATE)


def find_components(mask: np.ndarray, min_size: int = MIN_COMPONENT_SIZE) -> List[np.ndarray]:
    """
    Extract 8-connected components of a binary mask.

    Args:
        mask: Binary mask
        min_size: Components with fewer pixels are discarded

    Returns:
        List of Nx2 (x, y) pixel arrays in raster order, ordered by the
        raster position of each component's first pixel
    """
    count, labels = cv2.connectedComponents((mask > 0).astype(np.uint8), connectivity=8)

    components = []
    for label in range(1, count):
        ys, xs = np.nonzero(labels == label)
        if len(xs) >= min_size:
            components.append(np.column_stack((xs, ys)))

    width = mask.shape[1]
    components.sort(key=lambda p: int(p[0, 1]) * width + int(p[0, 0]))
    return components


def component_stats(pixels: np.ndarray, color: str = "") -> Component:
    """
    Compute shape statistics for one component.

    Extremal points come from a two-pass farthest-point search (farthest
    pixel from the first pixel, then farthest from that), not from PCA.

    Args:
        pixels: Nx2 (x, y) pixel array, first row is the seed pixel
        color: Mask colour the component came from

    Returns:
        Component statistics
    """
    xs = pixels[:, 0].astype(np.int64)
    ys = pixels[:, 1].astype(np.int64)
    min_x, max_x = int(xs.min()), int(xs.max())
    min_y, max_y = int(ys.min()), int(ys.max())
    bbox_w = max(1, max_x - min_x + 1)
    bbox_h = max(1, max_y - min_y + 1)

    d2 = (xs - xs[0]) ** 2 + (ys - ys[0]) ** 2
    far = int(np.argmax(d2))
    d2 = (xs - xs[far]) ** 2 + (ys - ys[far]) ** 2
    far2 = int(np.argmax(d2))

    p1 = (int(xs[far]), int(ys[far]))
    p2 = (int(xs[far2]), int(ys[far2]))
    min_point, max_point = (p2, p1) if p1[1] > p2[1] else (p1, p2)

    return Component(
        color=color,
        pixel_count=len(pixels),
        bbox=(min_x, min_y, max_x, max_y),
        min_point=min_point,
        max_point=max_point,
        length=float(np.sqrt(d2[far2])),
        aspect=max(bbox_w, bbox_h) / max(1, min(bbox_w, bbox_h)),
    )


def is_plausible(component: Component) -> bool:
    """True if the component is elongated enough to be a snake or ladder."""
    return component.aspect > MIN_ASPECT and component.length > MIN_LENGTH
