"""
Stencil style definitions
Each style is an immutable parameter record for the shared edge pipeline;
artist style ids are aliases onto the five pipelines.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

DEFAULT_STYLE_ID = "classic"

logger = logging.getLogger(__name__)

# Morphological post-processing steps
MORPH_NONE = "none"
MORPH_OPEN = "open"
MORPH_DILATE = "dilate"


@dataclass(frozen=True)
class StyleConfig:
    """Parameters for one stencil pipeline"""

    pipeline: str
    name: str
    description: str

    blur_sigma: float  # 0 disables the blur
    edge_strength_multiplier: float
    low_threshold_factor: float
    high_threshold_factor: float

    morphological_op: str = MORPH_NONE
    dilate_passes: int = 0
    hatching_enabled: bool = False

    equalize: bool = True
    boost_contrast: bool = False
    suppress_non_maxima: bool = False

    # Classic maps detail through 200 - detail so higher detail means more lines
    invert_detail: bool = False
    low_threshold_floor: float = 0.0
    high_threshold_floor: float = 0.0

    # Minimalist keeps its fixed multiplier regardless of the user edge strength
    follows_edge_strength: bool = True

    def thresholds(self, detail: float) -> Tuple[float, float]:
        """Low and high hysteresis thresholds for a user detail value"""
        base = 200 - detail if self.invert_detail else detail
        low = max(self.low_threshold_floor, base * self.low_threshold_factor)
        high = max(self.high_threshold_floor, base * self.high_threshold_factor)
        return low, high

    def edge_multiplier(self, edge_strength: float = 1.0) -> float:
        """Sobel multiplier after applying the user edge strength"""
        if not self.follows_edge_strength:
            return self.edge_strength_multiplier
        return self.edge_strength_multiplier * edge_strength


STYLES: Dict[str, StyleConfig] = {
    "classic": StyleConfig(
        pipeline="classic",
        name="Classic",
        description="Bold lines for traditional work",
        blur_sigma=1.0,
        edge_strength_multiplier=1.0,
        low_threshold_factor=0.2,
        high_threshold_factor=0.8,
        morphological_op=MORPH_OPEN,
        suppress_non_maxima=True,
        invert_detail=True,
        low_threshold_floor=5.0,
        high_threshold_floor=20.0,
    ),
    "geometric": StyleConfig(
        pipeline="geometric",
        name="Darwin Enriquez",
        description="Clean, precise and detailed lines",
        blur_sigma=0.5,
        edge_strength_multiplier=0.7,
        low_threshold_factor=0.6,
        high_threshold_factor=1.2,
        suppress_non_maxima=True,
    ),
    "minimalist": StyleConfig(
        pipeline="minimalist",
        name="Andres Makishi",
        description="Minimalist fine-line",
        blur_sigma=1.5,
        edge_strength_multiplier=0.5,
        low_threshold_factor=1.5,
        high_threshold_factor=2.0,
        equalize=False,
        follows_edge_strength=False,
    ),
    "tribal": StyleConfig(
        pipeline="tribal",
        name="Adrian Rod",
        description="Heavy lines with high contrast",
        blur_sigma=0.0,
        edge_strength_multiplier=2.5,
        low_threshold_factor=0.3,
        high_threshold_factor=0.7,
        morphological_op=MORPH_DILATE,
        dilate_passes=2,
        equalize=False,
        boost_contrast=True,
    ),
    "realistic": StyleConfig(
        pipeline="realistic",
        name="Stiven Hernandez",
        description="Detailed lines with hatched shading",
        blur_sigma=0.7,
        edge_strength_multiplier=1.0,
        low_threshold_factor=0.4,
        high_threshold_factor=0.9,
        hatching_enabled=True,
    ),
}

# Public style ids accepted from clients
STYLE_ALIASES: Dict[str, str] = {
    "classic": "classic",
    "darwin-enriquez": "geometric",
    "stiven-hernandez": "realistic",
    "andres-makishi": "minimalist",
    "adrian-rod": "tribal",
}


def resolve_style(style_id: str) -> StyleConfig:
    """Look up the pipeline for a style id, falling back to classic"""
    pipeline = STYLE_ALIASES.get(style_id)
    if pipeline is None:
        logger.info(f"Unknown style '{style_id}', using {DEFAULT_STYLE_ID}")
        pipeline = STYLE_ALIASES[DEFAULT_STYLE_ID]
    return STYLES[pipeline]


def list_styles() -> List[Dict]:
    """Style catalog for clients"""
    return [
        {
            "id": style_id,
            "name": STYLES[pipeline].name,
            "description": STYLES[pipeline].description,
            "pipeline": pipeline,
        }
        for style_id, pipeline in STYLE_ALIASES.items()
    ]
