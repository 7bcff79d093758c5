"""
Binary morphology on stencil masks
3x3 erosion, dilation and opening; the outermost ring is never modified
"""

import numpy as np

from stencil.pixels import INK, PAPER, neighbourhood_views


def _other(value: int) -> int:
    return PAPER if value == INK else INK


def erode(mask: np.ndarray, foreground: int = INK) -> np.ndarray:
    """A pixel stays foreground only if it and all 8 neighbours are foreground"""
    result = mask.copy()
    height, width = mask.shape
    if height < 3 or width < 3:
        return result

    solid = np.logical_and.reduce(neighbourhood_views(mask == foreground))
    result[1:-1, 1:-1] = np.where(solid, foreground, _other(foreground))
    return result


def dilate(mask: np.ndarray, foreground: int = INK, iterations: int = 1) -> np.ndarray:
    """A pixel becomes foreground if it or any of its 8 neighbours is foreground"""
    result = mask.copy()
    height, width = mask.shape
    if height < 3 or width < 3:
        return result

    for _ in range(iterations):
        touched = np.logical_or.reduce(neighbourhood_views(result == foreground))
        result[1:-1, 1:-1] = np.where(touched, foreground, _other(foreground))
    return result


def opening(mask: np.ndarray, foreground: int = INK) -> np.ndarray:
    """Erosion followed by dilation; drops foreground specks narrower than 3px"""
    return dilate(erode(mask, foreground), foreground)
