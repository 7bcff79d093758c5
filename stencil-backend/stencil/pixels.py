"""
Pixel buffer helpers
Luminance, hex colour parsing and final recolouring of stencil masks
"""

import re
import logging
from typing import List, Tuple

import numpy as np

from stencil.errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Binary mask values: lines are dark, background is white
INK = 0
PAPER = 255

LUMA_WEIGHTS = (0.299, 0.587, 0.114)  # R, G, B

HEX_COLOR_PATTERN = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Perceptual luma of an RGBA/RGB raster as unrounded floats"""
    rgb = rgba[..., :3].astype(np.float64)
    r_weight, g_weight, b_weight = LUMA_WEIGHTS
    return r_weight * rgb[..., 0] + g_weight * rgb[..., 1] + b_weight * rgb[..., 2]


def clip_to_byte(values: np.ndarray) -> np.ndarray:
    """Round half-to-even and clamp into a uint8 buffer"""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def to_grayscale(rgba: np.ndarray) -> np.ndarray:
    """Convert an RGBA raster to a single-channel intensity buffer"""
    return clip_to_byte(luminance(rgba))


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """
    Parse a 6-digit hex colour

    Args:
        color: "#RRGGBB" or "RRGGBB", case-insensitive

    Returns:
        (r, g, b) tuple

    Raises:
        InvalidParameterError: if the string is not a 6-digit hex colour
    """
    match = HEX_COLOR_PATTERN.match(color) if isinstance(color, str) else None
    if match is None:
        raise InvalidParameterError(f"Invalid line color: {color!r} (expected #RRGGBB)")
    return tuple(int(part, 16) for part in match.groups())


def recolor(
    mask: np.ndarray,
    line_rgb: Tuple[int, int, int],
    transparent_background: bool = False
) -> np.ndarray:
    """
    Paint a binary mask into the final RGBA stencil

    Args:
        mask: Single-channel mask, dark (<128) pixels are lines
        line_rgb: Colour applied to every line pixel
        transparent_background: Make non-line pixels fully transparent

    Returns:
        RGBA raster with the same height and width as the mask
    """
    height, width = mask.shape
    lines = mask < 128

    result = np.full((height, width, 4), 255, dtype=np.uint8)
    result[lines, :3] = line_rgb
    if transparent_background:
        result[~lines, 3] = 0

    logger.debug(f"Recolored {int(np.count_nonzero(lines))} line pixels to RGB{tuple(line_rgb)}")
    return result


def neighbourhood_views(values: np.ndarray) -> List[np.ndarray]:
    """The nine 3x3-window views aligned on the interior pixels of a 2D buffer"""
    height, width = values.shape
    return [
        values[dy:height - 2 + dy, dx:width - 2 + dx]
        for dy in range(3)
        for dx in range(3)
    ]
