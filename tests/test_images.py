import io

import pytest
from PIL import Image

from core.domain.constants import MAX_AVATAR_PIXELS
from core.utils.images import AVATAR_UPLOAD_ERROR, ImageTooLarge, optimize_avatar, validate_image


def _png(size, mode="1") -> bytes:
    out = io.BytesIO()
    Image.new(mode, size).save(out, format="PNG")
    return out.getvalue()


def test_small_file_with_huge_dimensions_is_rejected():
    data = _png((7000, 7000))
    assert 7000 * 7000 > MAX_AVATAR_PIXELS
    assert len(data) < 1024 * 1024

    assert validate_image(data) == (False, AVATAR_UPLOAD_ERROR)
    with pytest.raises(ImageTooLarge):
        optimize_avatar(data)


def test_decompression_bomb_is_rejected(monkeypatch):
    data = _png((100, 100))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    assert validate_image(data) == (False, AVATAR_UPLOAD_ERROR)
    with pytest.raises(OSError):
        optimize_avatar(data)


def test_avatar_is_downscaled_to_jpeg():
    jpeg = optimize_avatar(_png((800, 600), "RGB"))
    with Image.open(io.BytesIO(jpeg)) as img:
        assert img.format == "JPEG"
        assert img.size == (400, 300)
