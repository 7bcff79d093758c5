"""Local image-to-stencil pipeline.

Stages live in their own modules (blur, contrast, edges, morphology,
hatching); styles.py holds the per-style parameters and pipeline.py runs them.
codec.py converts between encoded images and RGBA arrays for the service layer.
"""

from .errors import DecodeError, InvalidParameterError, StencilError
from .pipeline import StencilProcessor, StencilRequest, StencilResult, render_stencil

__all__ = [
    "DecodeError",
    "InvalidParameterError",
    "StencilError",
    "StencilProcessor",
    "StencilRequest",
    "StencilResult",
    "render_stencil",
]
