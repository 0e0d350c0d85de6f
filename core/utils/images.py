"""
Avatar image validation and optimization.
Uploads are re-encoded as bounded-size JPEGs before they hit storage.
"""

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from core.domain.constants import (
    ALLOWED_IMAGE_FORMATS,
    AVATAR_JPEG_QUALITY,
    AVATAR_MAX_DIMENSION,
    MAX_AVATAR_BYTES,
    MAX_AVATAR_PIXELS,
)

AVATAR_UPLOAD_ERROR = "We couldn't upload this image. Please use PNG or JPG up to 5MB."


class ImageTooLarge(OSError):
    """Pixel dimensions exceed what we are willing to decode."""


def _check_pixels(img: Image.Image) -> None:
    # Header only; a tiny file can still declare huge dimensions
    width, height = img.size
    if width * height > MAX_AVATAR_PIXELS:
        raise ImageTooLarge(f"{width}x{height} exceeds {MAX_AVATAR_PIXELS} pixels")


def validate_image(data: bytes) -> Tuple[bool, str]:
    """Check size, format and dimensions without decoding the full image."""
    if not data:
        return False, AVATAR_UPLOAD_ERROR
    if len(data) > MAX_AVATAR_BYTES:
        return False, AVATAR_UPLOAD_ERROR
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format not in ALLOWED_IMAGE_FORMATS:
                return False, AVATAR_UPLOAD_ERROR
            _check_pixels(img)
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError):
        return False, AVATAR_UPLOAD_ERROR
    return True, ""


def optimize_avatar(data: bytes, max_dimension: int = AVATAR_MAX_DIMENSION) -> bytes:
    """Downscale to fit max_dimension and re-encode as JPEG.

    Raises OSError for anything that cannot be decoded safely.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            _check_pixels(img)
            img.draft("RGB", (max_dimension, max_dimension))
            img = img.convert("RGB")
            img.thumbnail((max_dimension, max_dimension))
            out = io.BytesIO()
            img.save(out, format="JPEG", quality=AVATAR_JPEG_QUALITY, optimize=True)
            return out.getvalue()
    except Image.DecompressionBombError as e:
        raise ImageTooLarge(str(e)) from e
