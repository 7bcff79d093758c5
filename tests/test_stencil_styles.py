"""
Test Suite: Stencil Styles
End-to-end rendering through each style pipeline plus request validation
"""

import numpy as np
import pytest
from PIL import Image, ImageDraw

from stencil.errors import InvalidParameterError
from stencil.pipeline import StencilProcessor, StencilRequest, render_stencil
from stencil.styles import STYLE_ALIASES, list_styles, resolve_style


def create_square_image(size=100, square=20, fill=(0, 0, 0)):
    """White canvas with a centred solid square (40..59 for the defaults)"""
    img = Image.new('RGBA', (size, size), color='white')
    draw = ImageDraw.Draw(img)
    start = (size - square) // 2
    end = start + square - 1
    draw.rectangle([start, start, end, end], fill=fill + (255,))
    return np.array(img)


def create_noise_image(width=40, height=30, seed=7):
    rng = np.random.default_rng(seed)
    rgba = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    rgba[..., 3] = 255
    return rgba


def ink_of(stencil):
    """Line pixels of an opaque black-on-white stencil"""
    return stencil[..., 0] < 128


def top_line_width(stencil):
    """Ink pixels crossed by a vertical probe through the square's top edge"""
    return int(np.count_nonzero(ink_of(stencil)[25:50, 50]))


# --- Scenario tests ---

def test_classic_outlines_square():
    """Classic style draws a thin closed outline around the square"""
    image = create_square_image()
    stencil = render_stencil(image, "classic", 80, "#000000", False)

    assert stencil.shape == image.shape
    ink = ink_of(stencil)
    assert ink.any(), "Expected outline pixels"

    ys, xs = np.nonzero(ink)
    assert ys.min() >= 34 and ys.max() <= 65, "Ink strayed away from the square"
    assert xs.min() >= 34 and xs.max() <= 65, "Ink strayed away from the square"
    assert not ink[44:56, 44:56].any(), "Square interior should stay white"

    # Closed: every side is crossed by the outline along its length
    for i in range(40, 60):
        assert ink[34:43, i].any(), f"Gap in top side at x={i}"
        assert ink[57:66, i].any(), f"Gap in bottom side at x={i}"
        assert ink[i, 34:43].any(), f"Gap in left side at y={i}"
        assert ink[i, 57:66].any(), f"Gap in right side at y={i}"

    assert 1 <= top_line_width(stencil) <= 4, "Classic outline should be thin"


def test_tribal_lines_are_thicker_than_classic():
    """Double dilation makes adrian-rod lines at least twice as wide"""
    image = create_square_image()
    classic = render_stencil(image, "classic", 80)
    tribal = render_stencil(image, "adrian-rod", 80)

    assert tribal.shape == image.shape
    assert top_line_width(tribal) >= 2 * top_line_width(classic)


def test_unknown_style_matches_classic_exactly():
    image = create_square_image()
    fallback = render_stencil(image, "nonexistent", 80, "#000000", False)
    classic = render_stencil(image, "classic", 80, "#000000", False)
    assert np.array_equal(fallback, classic)


def test_line_color_applied_exactly():
    """Foreground takes the exact line colour, background stays white"""
    stencil = render_stencil(create_square_image(), "classic", 80, "#FF0000", False)
    colors = {tuple(c) for c in stencil.reshape(-1, 4).tolist()}
    assert (255, 0, 0, 255) in colors
    assert colors <= {(255, 0, 0, 255), (255, 255, 255, 255)}


def test_transparent_background_alpha():
    stencil = render_stencil(create_square_image(), "classic", 80, "#000000", True)
    alpha = stencil[..., 3]
    assert set(np.unique(alpha).tolist()) == {0, 255}
    assert np.all(alpha[ink_of(stencil)] == 255)
    assert alpha[5, 5] == 0


def test_realistic_hatches_dark_regions():
    """Stiven Hernandez shades the dark square with a hatch pattern"""
    stencil = render_stencil(create_square_image(), "stiven-hernandez", 80)
    ink = ink_of(stencil)
    assert ink[50, 50], "(x+y) even inside a dark region is hatched"
    assert not ink[50, 51], "101 is not on any hatch period"
    assert not ink[10, 10], "White background gets no hatching"


@pytest.mark.parametrize("style_id", sorted(STYLE_ALIASES))
def test_every_style_preserves_size_and_alpha(style_id):
    image = create_noise_image()
    for transparent in (False, True):
        stencil = render_stencil(image, style_id, 100, "#123456", transparent)
        assert stencil.shape == image.shape
        assert stencil.dtype == np.uint8
        allowed = {0, 255} if transparent else {255}
        assert set(np.unique(stencil[..., 3]).tolist()) <= allowed


@pytest.mark.parametrize("size", [(1, 1), (2, 2), (3, 5)])
def test_tiny_images_render(size):
    height, width = size
    image = np.full((height, width, 4), 255, dtype=np.uint8)
    for style_id in STYLE_ALIASES:
        assert render_stencil(image, style_id).shape == image.shape


def test_uniform_image_renders_blank():
    image = np.full((20, 20, 4), 90, dtype=np.uint8)
    image[..., 3] = 255
    stencil = render_stencil(image, "classic", 80)
    assert np.all(stencil == 255)


def test_input_is_not_modified():
    image = create_square_image()
    before = image.copy()
    render_stencil(image, "stiven-hernandez", 80)
    assert np.array_equal(image, before)


def test_processor_result_metadata():
    result = StencilProcessor().process_image(
        StencilRequest(image=create_square_image(), style_id="darwin-enriquez", detail=60)
    )
    info = result.to_dict()
    assert info["pipeline"] == "geometric"
    assert info["styleUsed"] == "Darwin Enriquez"
    assert (info["width"], info["height"]) == (100, 100)
    assert result.processing_time >= 0


def test_edge_strength_only_adds_lines():
    """Raising edge strength keeps every line and can only add more"""
    image = create_square_image(fill=(235, 235, 235))
    faint = render_stencil(image, "darwin-enriquez", 150, edge_strength=1.0)
    strong = render_stencil(image, "darwin-enriquez", 150, edge_strength=50.0)
    assert ink_of(strong).any()
    assert np.all(ink_of(strong)[ink_of(faint)])


# --- Validation ---

@pytest.mark.parametrize("image", [
    np.zeros((10, 10, 3), dtype=np.uint8),
    np.zeros((0, 10, 4), dtype=np.uint8),
    np.zeros((10, 10, 4), dtype=np.float32),
    [[0, 0, 0, 255]],
])
def test_rejects_malformed_images(image):
    with pytest.raises(InvalidParameterError):
        render_stencil(image)


@pytest.mark.parametrize("kwargs", [
    {"line_color": "#12345"},
    {"line_color": "blue"},
    {"detail": 300},
    {"detail": -1},
    {"detail": "80"},
    {"edge_strength": 0},
    {"edge_strength": float("inf")},
    {"edge_strength": float("nan")},
    {"transparent_background": "false"},
    {"transparent_background": 1},
    {"style_id": 5},
])
def test_rejects_bad_parameters(kwargs):
    with pytest.raises(InvalidParameterError):
        render_stencil(create_square_image(size=10, square=4), **kwargs)


# --- Style table ---

def test_style_aliases_resolve():
    assert resolve_style("classic").pipeline == "classic"
    assert resolve_style("darwin-enriquez").pipeline == "geometric"
    assert resolve_style("stiven-hernandez").pipeline == "realistic"
    assert resolve_style("andres-makishi").pipeline == "minimalist"
    assert resolve_style("adrian-rod").pipeline == "tribal"
    assert resolve_style("nonexistent").pipeline == "classic"


def test_threshold_policies():
    assert resolve_style("classic").thresholds(80) == pytest.approx((24, 96))
    # Inverted mapping hits the floors for high detail
    assert resolve_style("classic").thresholds(190) == pytest.approx((5, 20))
    assert resolve_style("darwin-enriquez").thresholds(100) == pytest.approx((60, 120))
    assert resolve_style("andres-makishi").thresholds(100) == pytest.approx((150, 200))
    assert resolve_style("adrian-rod").thresholds(100) == pytest.approx((30, 70))
    assert resolve_style("stiven-hernandez").thresholds(100) == pytest.approx((40, 90))


def test_edge_multipliers():
    assert resolve_style("adrian-rod").edge_multiplier(2.0) == pytest.approx(5.0)
    assert resolve_style("darwin-enriquez").edge_multiplier(1.0) == pytest.approx(0.7)
    # Minimalist ignores the user edge strength
    assert resolve_style("andres-makishi").edge_multiplier(2.0) == pytest.approx(0.5)


def test_style_catalog():
    catalog = list_styles()
    assert [entry["id"] for entry in catalog] == list(STYLE_ALIASES)
    assert all(entry["name"] and entry["description"] for entry in catalog)
