"""
Gaussian blur stage
Suppresses sensor noise before gradients are measured
"""

import logging

import numpy as np

from stencil.pixels import clip_to_byte

logger = logging.getLogger(__name__)

KERNEL_RADIUS = 2  # 5x5 window

# Integer approximation of a sigma=1.0 Gaussian, weights sum to 273
BASE_KERNEL = np.array([
    [1, 4, 7, 4, 1],
    [4, 16, 26, 16, 4],
    [7, 26, 41, 26, 7],
    [4, 16, 26, 16, 4],
    [1, 4, 7, 4, 1],
], dtype=np.float64)
BASE_KERNEL_SUM = 273
BASE_SIGMA = 1.0


def gaussian_kernel(sigma: float) -> np.ndarray:
    """
    Normalized 5x5 Gaussian weights for the given sigma

    sigma=1.0 gives the classic 273-sum kernel; other values re-derive the
    weights over the same window.
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be positive, got {sigma}")

    if sigma == BASE_SIGMA:
        return BASE_KERNEL / BASE_KERNEL_SUM

    offsets = np.arange(-KERNEL_RADIUS, KERNEL_RADIUS + 1, dtype=np.float64)
    profile = np.exp(-(offsets ** 2) / (2.0 * sigma * sigma))
    kernel = np.outer(profile, profile)
    return kernel / kernel.sum()


def gaussian_blur(rgba: np.ndarray, sigma: float = BASE_SIGMA) -> np.ndarray:
    """
    Blur the colour channels of an RGBA raster

    Samples outside the image read the nearest edge pixel, so every pixel
    (border included) is computed. Alpha is copied through untouched.

    Args:
        rgba: uint8 array of shape (H, W, 4)
        sigma: Gaussian sigma, <= 0 returns an unblurred copy

    Returns:
        New uint8 RGBA array of the same shape
    """
    if sigma <= 0:
        return rgba.copy()

    kernel = gaussian_kernel(sigma)
    height, width = rgba.shape[:2]
    r = KERNEL_RADIUS

    padded = np.pad(
        rgba[..., :3].astype(np.float64),
        ((r, r), (r, r), (0, 0)),
        mode="edge"
    )

    # Weighted sum of shifted views
    accumulator = np.zeros((height, width, 3), dtype=np.float64)
    for ky in range(2 * r + 1):
        for kx in range(2 * r + 1):
            accumulator += kernel[ky, kx] * padded[ky:ky + height, kx:kx + width]

    blurred = rgba.copy()
    blurred[..., :3] = clip_to_byte(accumulator)
    logger.debug(f"Gaussian blur sigma={sigma} applied to {width}x{height} image")
    return blurred
