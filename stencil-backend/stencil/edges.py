"""
Edge detection and refinement
Sobel gradient magnitude, 4-neighbour non-maximum suppression and
single-pass hysteresis thresholding
"""

import logging

import numpy as np

from stencil.pixels import INK, PAPER, clip_to_byte, neighbourhood_views

logger = logging.getLogger(__name__)


def _has_interior(shape) -> bool:
    height, width = shape[:2]
    return height >= 3 and width >= 3


def sobel_magnitude(gray: np.ndarray, multiplier: float = 1.0) -> np.ndarray:
    """
    Gradient magnitude using the 3x3 Sobel operator

    Args:
        gray: uint8 intensity buffer
        multiplier: Edge strength applied before clamping to 255

    Returns:
        uint8 edge map, the outer 1-pixel ring is always 0
    """
    edges = np.zeros(gray.shape, dtype=np.uint8)
    if not _has_interior(gray.shape):
        return edges

    g = gray.astype(np.float64)
    top_left, top, top_right = g[:-2, :-2], g[:-2, 1:-1], g[:-2, 2:]
    left, right = g[1:-1, :-2], g[1:-1, 2:]
    bottom_left, bottom, bottom_right = g[2:, :-2], g[2:, 1:-1], g[2:, 2:]

    gx = (top_right + 2 * right + bottom_right) - (top_left + 2 * left + bottom_left)
    gy = (bottom_left + 2 * bottom + bottom_right) - (top_left + 2 * top + top_right)

    magnitude = np.sqrt(gx * gx + gy * gy) * multiplier
    edges[1:-1, 1:-1] = clip_to_byte(magnitude)
    return edges


def non_maximum_suppression(edges: np.ndarray) -> np.ndarray:
    """
    Keep a pixel only if it is >= its up, down, left and right neighbours

    Thins gradient ridges toward single-pixel lines. Border pixels are 0.
    """
    thinned = np.zeros(edges.shape, dtype=np.uint8)
    if not _has_interior(edges.shape):
        return thinned

    center = edges[1:-1, 1:-1]
    keep = (
        (center >= edges[:-2, 1:-1])
        & (center >= edges[2:, 1:-1])
        & (center >= edges[1:-1, :-2])
        & (center >= edges[1:-1, 2:])
    )
    thinned[1:-1, 1:-1] = np.where(keep, center, 0)
    return thinned


def hysteresis_threshold(edges: np.ndarray, low: float, high: float) -> np.ndarray:
    """
    Double-threshold an edge map into a binary stencil mask

    Pixels >= high are strong; pixels in [low, high) are weak and become lines
    only when one of their 8 neighbours was strong before promotion started.
    Promotion is a single pass and does not chain through other weak pixels.

    Args:
        edges: uint8 edge magnitudes
        low: Weak threshold
        high: Strong threshold

    Returns:
        uint8 mask with INK (0) for lines and PAPER (255) elsewhere
    """
    strong = edges >= high
    weak = (edges >= low) & ~strong

    lines = strong.copy()
    if _has_interior(edges.shape):
        near_strong = np.logical_or.reduce(neighbourhood_views(strong))
        lines[1:-1, 1:-1] |= weak[1:-1, 1:-1] & near_strong

    logger.debug(
        f"Hysteresis low={low:.1f} high={high:.1f}: "
        f"{int(np.count_nonzero(strong))} strong, "
        f"{int(np.count_nonzero(lines) - np.count_nonzero(strong))} promoted"
    )
    return np.where(lines, INK, PAPER).astype(np.uint8)
