"""
Contrast enhancement stage
Histogram equalization and the hard-edged contrast curve used by bold styles
"""

import logging

import numpy as np

from stencil.pixels import clip_to_byte

logger = logging.getLogger(__name__)


def equalize_histogram(gray: np.ndarray) -> np.ndarray:
    """
    Spread intensities over the full 0-255 range

    Each value v maps to round((CDF[v] - cdfMin) / (total - cdfMin) * 255).
    A uniform image has cdfMin == total and is returned unchanged.

    Args:
        gray: uint8 intensity buffer

    Returns:
        New uint8 buffer of the same shape
    """
    total = gray.size
    if total == 0:
        return gray.copy()

    histogram = np.bincount(gray.ravel(), minlength=256)
    cdf = np.cumsum(histogram)
    cdf_min = int(cdf[np.flatnonzero(cdf)[0]])

    if cdf_min == total:
        logger.debug("Uniform image, skipping histogram equalization")
        return gray.copy()

    scaled = (cdf - cdf_min) / float(total - cdf_min) * 255.0
    # Half-up rounding
    lookup = np.clip(np.floor(scaled + 0.5), 0, 255).astype(np.uint8)
    return lookup[gray]


def boost_contrast(luma: np.ndarray) -> np.ndarray:
    """
    Push shadows down and highlights up around mid-grey

    v < 128 becomes v * 0.5, v >= 128 becomes 128 + (v - 128) * 1.5.

    Args:
        luma: Intensities (float or uint8)

    Returns:
        uint8 buffer
    """
    values = np.asarray(luma, dtype=np.float64)
    boosted = np.where(values < 128, values * 0.5, 128 + (values - 128) * 1.5)
    return clip_to_byte(boosted)
