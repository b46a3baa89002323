from io import BytesIO

from PIL import Image, UnidentifiedImageError

OCTET_STREAM = "application/octet-stream"

FORMAT_MIME_TYPES: dict[str, str] = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
}

FORMAT_EXTENSIONS: dict[str, str] = {
    "JPEG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "GIF": "gif",
    "BMP": "bmp",
    "TIFF": "tif",
}


def get_pil_format(format_str: str) -> str:
    """Convert format string to PIL format name."""
    format_map = {
        "jpg": "JPEG",
        "jpeg": "JPEG",
        "png": "PNG",
        "webp": "WEBP",
        "gif": "GIF",
        "bmp": "BMP",
        "tif": "TIFF",
        "tiff": "TIFF",
    }
    return format_map.get(format_str.lower().lstrip("."), format_str.upper())


def get_mime_type(pil_format: str) -> str:
    return FORMAT_MIME_TYPES.get(pil_format.upper()) or Image.MIME.get(pil_format.upper(), OCTET_STREAM)


def get_extension(pil_format: str) -> str:
    fmt = pil_format.upper()
    return FORMAT_EXTENSIONS.get(fmt, fmt.lower())


def determine_mime(data: bytes) -> str:
    """Sniff the MIME type of encoded image bytes from their header.

    Only the header is parsed; pixel data is not decoded.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
    except (Image.DecompressionBombError, UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return OCTET_STREAM
    if not fmt:
        return OCTET_STREAM
    return get_mime_type(fmt)