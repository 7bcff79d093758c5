"""
Stencil pipeline
Turns an RGBA photo into tattoo line art using the stage sequence of the
selected style: blur, grayscale/contrast, Sobel, thinning, hysteresis,
morphology or hatching, then recolouring.
"""

import math
import time
import logging
from dataclasses import dataclass
from numbers import Real
from typing import Dict, Optional, Tuple

import numpy as np

from stencil.blur import gaussian_blur
from stencil.contrast import boost_contrast, equalize_histogram
from stencil.edges import hysteresis_threshold, non_maximum_suppression, sobel_magnitude
from stencil.errors import InvalidParameterError
from stencil.hatching import apply_hatching
from stencil.morphology import dilate, opening
from stencil.pixels import PAPER, hex_to_rgb, luminance, recolor, to_grayscale
from stencil.styles import DEFAULT_STYLE_ID, MORPH_DILATE, MORPH_OPEN, StyleConfig, resolve_style

logger = logging.getLogger(__name__)

DEFAULT_DETAIL = 128
DEFAULT_LINE_COLOR = "#000000"
DEFAULT_EDGE_STRENGTH = 1.0


@dataclass
class StencilRequest:
    """Everything one pipeline run needs"""

    image: np.ndarray  # uint8 RGBA, shape (H, W, 4)
    style_id: str = DEFAULT_STYLE_ID
    detail: float = DEFAULT_DETAIL  # 0-255, typically 20-180
    line_color: str = DEFAULT_LINE_COLOR
    transparent_background: bool = False
    edge_strength: float = DEFAULT_EDGE_STRENGTH


@dataclass
class StencilResult:
    """Rendered stencil and run metadata"""

    image: np.ndarray  # uint8 RGBA, same size as the input
    style: StyleConfig
    processing_time: float

    @property
    def width(self) -> int:
        return self.image.shape[1]

    @property
    def height(self) -> int:
        return self.image.shape[0]

    def to_dict(self) -> Dict:
        return {
            "styleUsed": self.style.name,
            "pipeline": self.style.pipeline,
            "width": self.width,
            "height": self.height,
            "processingTime": self.processing_time,
        }


def _validate_image(image) -> None:
    if not isinstance(image, np.ndarray):
        raise InvalidParameterError("Image must be a numpy array")
    if image.ndim != 3 or image.shape[2] != 4:
        raise InvalidParameterError(f"Image must have shape (H, W, 4), got {image.shape}")
    if image.shape[0] <= 0 or image.shape[1] <= 0:
        raise InvalidParameterError(f"Image dimensions must be positive, got {image.shape[1]}x{image.shape[0]}")
    if image.dtype != np.uint8:
        raise InvalidParameterError(f"Image must be uint8, got {image.dtype}")


def validate_request(request: StencilRequest) -> Tuple[int, int, int]:
    """
    Check a request before any stage runs

    Returns:
        Parsed line colour as (r, g, b)

    Raises:
        InvalidParameterError: on a malformed image or parameter
    """
    _validate_image(request.image)

    if not isinstance(request.style_id, str):
        raise InvalidParameterError(f"Style id must be a string, got {type(request.style_id).__name__}")

    detail = request.detail
    if isinstance(detail, bool) or not isinstance(detail, Real) or not 0 <= detail <= 255:
        raise InvalidParameterError(f"Detail must be a number between 0 and 255, got {detail!r}")

    strength = request.edge_strength
    if (isinstance(strength, bool) or not isinstance(strength, Real)
            or not math.isfinite(strength) or not strength > 0):
        raise InvalidParameterError(f"Edge strength must be a positive finite number, got {strength!r}")

    if not isinstance(request.transparent_background, bool):
        raise InvalidParameterError(
            f"Transparent background must be true or false, got {request.transparent_background!r}"
        )

    return hex_to_rgb(request.line_color)


def trace_edges(
    image: np.ndarray,
    style: StyleConfig,
    detail: float,
    edge_strength: float = DEFAULT_EDGE_STRENGTH
) -> np.ndarray:
    """
    Run one style's stage sequence

    Args:
        image: uint8 RGBA source
        style: Pipeline parameters
        detail: User detail value (0-255)
        edge_strength: User edge strength multiplier

    Returns:
        INK/PAPER mask with the same height and width as the image
    """
    # Step 1: Noise reduction and intensity
    if style.boost_contrast:
        gray = boost_contrast(luminance(image))
        logger.debug("Contrast-boosted grayscale from raw image")
    else:
        blurred = gaussian_blur(image, style.blur_sigma)
        gray = to_grayscale(blurred)
        if style.equalize:
            gray = equalize_histogram(gray)
        logger.debug(f"Grayscale after blur sigma={style.blur_sigma}, equalize={style.equalize}")

    # Step 2: Gradients
    multiplier = style.edge_multiplier(edge_strength)
    edges = sobel_magnitude(gray, multiplier)
    logger.debug(f"Sobel multiplier={multiplier:.2f}, max magnitude={int(edges.max())}")

    if style.suppress_non_maxima:
        edges = non_maximum_suppression(edges)

    # Step 3: Binarize
    low, high = style.thresholds(detail)
    mask = hysteresis_threshold(edges, low, high)

    # Step 4: Cleanup / styling
    if style.morphological_op == MORPH_OPEN:
        # Opened over the paper: removes paper specks and nicks between
        # strokes while keeping 1-2px lines intact
        mask = opening(mask, foreground=PAPER)
    elif style.morphological_op == MORPH_DILATE:
        mask = dilate(mask, iterations=style.dilate_passes)

    if style.hatching_enabled:
        mask = apply_hatching(mask, to_grayscale(image))

    return mask


class StencilProcessor:
    """Converts photos to stencils; holds no state between runs"""

    def process_image(self, request: StencilRequest) -> StencilResult:
        """
        Main processing pipeline

        Raises:
            InvalidParameterError: if the request is rejected before processing
        """
        line_rgb = validate_request(request)
        style = resolve_style(request.style_id)

        start = time.time()
        height, width = request.image.shape[:2]
        logger.info(
            f"Rendering {width}x{height} stencil: style={request.style_id} "
            f"({style.pipeline}), detail={request.detail}, color={request.line_color}"
        )

        mask = trace_edges(request.image, style, request.detail, request.edge_strength)
        stencil = recolor(mask, line_rgb, request.transparent_background)

        elapsed = time.time() - start
        logger.info(f"✓ Stencil complete in {elapsed:.2f}s")
        return StencilResult(image=stencil, style=style, processing_time=elapsed)


def render_stencil(
    image: np.ndarray,
    style_id: str = DEFAULT_STYLE_ID,
    detail: float = DEFAULT_DETAIL,
    line_color: str = DEFAULT_LINE_COLOR,
    transparent_background: bool = False,
    edge_strength: Optional[float] = None
) -> np.ndarray:
    """Convenience wrapper returning only the RGBA stencil"""
    request = StencilRequest(
        image=image,
        style_id=style_id,
        detail=detail,
        line_color=line_color,
        transparent_background=transparent_background,
        edge_strength=DEFAULT_EDGE_STRENGTH if edge_strength is None else edge_strength,
    )
    return StencilProcessor().process_image(request).image
