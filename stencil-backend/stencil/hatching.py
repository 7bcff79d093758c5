"""
Hatching for the realistic style
Simulates shading by inking diagonal dot patterns in dark regions
"""

import numpy as np

from stencil.pixels import INK, PAPER

# (grey level upper bound, diagonal period); darker regions get denser marks.
# Brackets are cumulative: a pixel below 80 also takes the 3- and 5-period marks.
HATCH_BANDS = ((80, 2), (120, 3), (160, 5))


def hatch_marks(gray: np.ndarray) -> np.ndarray:
    """Boolean map of pixels the hatch pattern inks for a grayscale source"""
    rows, cols = np.indices(gray.shape)
    diagonal = rows + cols

    marks = np.zeros(gray.shape, dtype=bool)
    for limit, period in HATCH_BANDS:
        marks |= (gray < limit) & (diagonal % period == 0)
    return marks


def apply_hatching(mask: np.ndarray, gray: np.ndarray) -> np.ndarray:
    """
    Ink hatch marks into the background of a stencil mask

    Args:
        mask: INK/PAPER stencil mask
        gray: Grayscale of the original (unblurred) image, same shape

    Returns:
        New mask; existing lines are kept, only PAPER pixels can change
    """
    hatched = mask.copy()
    hatched[(mask == PAPER) & hatch_marks(gray)] = INK
    return hatched
