"""Unit tests for media type utilities.

Tests format name mapping, MIME types, extensions and header sniffing.
Uses synthetic data (BytesIO) without requiring external files.
"""

from io import BytesIO

import pytest
from PIL import Image

from cl_batch_fit.utils.media_types import (
    OCTET_STREAM,
    determine_mime,
    get_extension,
    get_mime_type,
    get_pil_format,
)

# ============================================================================
# Format Mapping Tests
# ============================================================================


@pytest.mark.parametrize(
    "name,expected",
    [
        ("jpg", "JPEG"),
        ("JPEG", "JPEG"),
        (".png", "PNG"),
        ("webp", "WEBP"),
        ("tif", "TIFF"),
        ("bmp", "BMP"),
        ("heic", "HEIC"),
    ],
)
def test_get_pil_format(name: str, expected: str):
    """Test user format names map to Pillow format names."""
    assert get_pil_format(name) == expected


def test_get_mime_type():
    """Test Pillow format names map to MIME types."""
    assert get_mime_type("JPEG") == "image/jpeg"
    assert get_mime_type("png") == "image/png"
    assert get_mime_type("WEBP") == "image/webp"
    assert get_mime_type("NOT-A-FORMAT") == OCTET_STREAM


def test_get_extension():
    """Test output extensions use the short conventional form."""
    assert get_extension("JPEG") == "jpg"
    assert get_extension("TIFF") == "tif"
    assert get_extension("png") == "png"
    assert get_extension("PPM") == "ppm"


# ============================================================================
# determine_mime Tests
# ============================================================================


@pytest.mark.parametrize(
    "fmt,expected",
    [("JPEG", "image/jpeg"), ("PNG", "image/png"), ("GIF", "image/gif"), ("BMP", "image/bmp")],
)
def test_determine_mime_from_header(fmt: str, expected: str):
    """Test MIME detection from encoded image bytes."""
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color="blue").save(buffer, format=fmt)

    assert determine_mime(buffer.getvalue()) == expected


def test_determine_mime_unknown_data():
    """Test non-image data is reported as octet-stream."""
    assert determine_mime(b"just some text") == OCTET_STREAM
    assert determine_mime(b"") == OCTET_STREAM


def test_determine_mime_oversized_image(monkeypatch: pytest.MonkeyPatch):
    """Test an image over the decoder pixel limit is reported as octet-stream."""
    buffer = BytesIO()
    Image.new("1", (300, 300)).save(buffer, format="PNG")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10_000)

    assert determine_mime(buffer.getvalue()) == OCTET_STREAM
