"""
Image codec helpers for the service layer
Decodes uploads and data URLs into RGBA arrays and encodes stencils as PNG
"""

import re
import base64
import binascii
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from stencil.errors import DecodeError, InvalidParameterError

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]*)(?P<params>(;[\w.+-]+=[\w.+-]+)*);base64,(?P<payload>.*)$", re.DOTALL)
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, WebP...) to RGBA

    Raises:
        DecodeError: if the bytes are empty or not a supported image
    """
    if not data:
        raise DecodeError("Empty image data")

    buffer = np.frombuffer(data, np.uint8)
    img = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise DecodeError("Invalid image file")

    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise DecodeError(f"Unsupported pixel depth: {img.dtype}")

    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 3:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    elif img.shape[2] == 4:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    else:
        raise DecodeError(f"Unsupported channel count: {img.shape[2]}")

    logger.debug(f"Decoded image: {rgba.shape[1]}x{rgba.shape[0]}")
    return rgba


def split_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URL into its MIME type and raw bytes

    Raises:
        DecodeError: if the string is not a base64 data URL
    """
    match = DATA_URL_PATTERN.match(data_url.strip()) if isinstance(data_url, str) else None
    if match is None:
        raise DecodeError("Expected a base64 data URL (data:image/...;base64,...)")

    try:
        payload = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload: {e}") from e

    return match.group("mime"), payload


def decode_data_url(data_url: str) -> np.ndarray:
    """Decode a base64 image data URL to RGBA"""
    _, payload = split_data_url(data_url)
    return decode_image(payload)


def encode_png(rgba: np.ndarray) -> bytes:
    """Encode an RGBA array as PNG bytes"""
    ok, buffer = cv2.imencode('.png', cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
    if not ok:
        raise ValueError("PNG encoding failed")
    return buffer.tobytes()


def to_data_url(png_bytes: bytes, mime: str = "image/png") -> str:
    """Wrap encoded image bytes in a base64 data URL"""
    return f"data:{mime};base64,{base64.b64encode(png_bytes).decode('utf-8')}"


def fit_within(rgba: np.ndarray, max_width: int, max_height: int) -> np.ndarray:
    """
    Downscale an image to fit inside max_width x max_height

    Aspect ratio is preserved and images already inside the bounds are
    returned as-is.
    """
    height, width = rgba.shape[:2]
    if width <= max_width and height <= max_height:
        return rgba

    ratio = min(max_width / width, max_height / height)
    new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))  # (width, height) for cv2
    logger.info(f"Resizing from {width}x{height} to {new_size[0]}x{new_size[1]}")
    return cv2.resize(rgba, new_size, interpolation=cv2.INTER_AREA)


def validate_upload(
    content_type: Optional[str],
    size: int,
    max_bytes: int = MAX_UPLOAD_BYTES,
    allowed_types: Tuple[str, ...] = ALLOWED_CONTENT_TYPES
) -> None:
    """
    Reject uploads with an unsupported type or above the size limit

    Raises:
        InvalidParameterError: if the upload is not acceptable
    """
    if content_type not in allowed_types:
        raise InvalidParameterError(
            f"Unsupported file type: {content_type}. Only JPG, PNG and WebP are allowed."
        )
    if size > max_bytes:
        raise InvalidParameterError(
            f"File too large ({size} bytes). The maximum is {max_bytes // (1024 * 1024)}MB."
        )
