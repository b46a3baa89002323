"""Pure image fit computation logic: decode, resample onto a canvas, encode."""

import math
from dataclasses import dataclass
from io import BytesIO

from loguru import logger
from PIL import ExifTags, Image, ImageColor, ImageOps, UnidentifiedImageError

from ....common.errors import AllocationFailure, DecodeFailure, EncodeFailure
from ....common.schema_fit import FitMode, FitRequest, PlacementRect
from ....common.schema_item import FitResult
from ....utils.media_types import get_mime_type, get_pil_format
from ....utils.profiling import timed
from .geometry import resolve_placement

ENCODABLE_FORMATS = frozenset({"JPEG", "PNG", "WEBP", "GIF", "BMP", "TIFF"})
ALPHA_FORMATS = frozenset({"PNG", "WEBP", "GIF", "TIFF"})
FALLBACK_FORMAT = "PNG"

# EXIF orientations that rotate by 90 degrees
_SWAPPED_ORIENTATIONS = frozenset({5, 6, 7, 8})


@dataclass(frozen=True)
class DecodedImage:
    image: Image.Image
    format: str | None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


# ─────────────────────────────────────────────────────────────
# Decode
# ─────────────────────────────────────────────────────────────


def read_dimensions(data: bytes) -> tuple[int, int]:
    """
    Read natural (display) dimensions from the image header.

    Pixel data is not decoded; EXIF orientation is honoured so the result
    matches what decode_image() produces.

    Raises:
        DecodeFailure: If the bytes are not a recognizable image
        AllocationFailure: If the header declares a decompression bomb
    """
    try:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
            orientation = img.getexif().get(ExifTags.Base.Orientation)
    except Image.DecompressionBombError as exc:
        raise AllocationFailure(f"Image too large to decode: {exc}") from exc
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeFailure(f"Cannot identify image: {exc}") from exc

    if orientation in _SWAPPED_ORIENTATIONS:
        return height, width
    return width, height


def decode_image(data: bytes) -> DecodedImage:
    """
    Decode encoded bytes into a fully loaded, upright Pillow image.

    Only the first frame of animated images is used.

    Raises:
        DecodeFailure: If the bytes are unreadable or corrupt
        AllocationFailure: If the image is too large to decode
    """
    if not data:
        raise DecodeFailure("Empty image data")

    try:
        with Image.open(BytesIO(data)) as img:
            source_format = img.format
            img.load()
            upright = ImageOps.exif_transpose(img)
    except Image.DecompressionBombError as exc:
        raise AllocationFailure(f"Image too large to decode: {exc}") from exc
    except MemoryError as exc:
        raise AllocationFailure("Out of memory while decoding image") from exc
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeFailure(f"Failed to load image: {exc}") from exc

    return DecodedImage(image=upright, format=source_format)


# ─────────────────────────────────────────────────────────────
# Resample
# ─────────────────────────────────────────────────────────────


def working_mode(image: Image.Image) -> str:
    """Pixel mode used for the canvas: RGBA when the source has alpha."""
    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        return "RGBA"
    if image.mode == "L":
        return "L"
    return "RGB"


def allocate_canvas(
    mode: str,
    width: int,
    height: int,
    *,
    fill: str | None = None,
    max_pixels: int | None = None,
) -> Image.Image:
    """Allocate the target buffer, optionally pre-filled with a color.

    Without a fill the canvas is zeroed (transparent for RGBA).
    """
    if max_pixels is not None and width * height > max_pixels:
        raise AllocationFailure(
            f"Canvas {width}x{height} exceeds the limit of {max_pixels} pixels"
        )

    color: float | tuple[int, ...] = 0
    if fill is not None:
        color = ImageColor.getcolor(fill, mode)

    try:
        return Image.new(mode, (width, height), color)
    except MemoryError as exc:
        raise AllocationFailure(f"Cannot allocate {width}x{height} canvas") from exc


def _snap(value: float) -> int:
    # half-up, so that .5 edges do not alternate like round() does
    return math.floor(value + 0.5)


def _pixel_span(start: float, end: float, limit: int) -> tuple[int, int]:
    lo = min(max(_snap(start), 0), limit)
    hi = min(max(_snap(end), 0), limit)
    if hi <= lo:
        # sub-pixel draws still cover one pixel
        if lo >= limit:
            lo = limit - 1
        hi = lo + 1
    return lo, hi


def _source_span(lo: int, hi: int, offset: float, scale: float, size: int) -> tuple[float, float]:
    start = min(max((lo - offset) / scale, 0.0), float(size))
    end = min(max((hi - offset) / scale, 0.0), float(size))
    if end <= start:
        return 0.0, float(size)
    return start, end


def resample(
    source: Image.Image,
    placement: PlacementRect,
    dst_width: int,
    dst_height: int,
    mode: FitMode | str,
    background_color: str = "#000000",
    *,
    max_canvas_pixels: int | None = None,
) -> Image.Image:
    """
    Draw the source into the placement rectangle of a new canvas.

    The visible part of the placement (clipped to the canvas) is snapped to
    whole pixels and mapped back to a sub-pixel box of the source, which is
    resized with Lanczos interpolation. The drawn pixels replace the canvas
    pixels as is, so alpha of the source is kept and the background only
    shows where nothing is drawn.

    Args:
        source: Decoded source image
        placement: Result of resolve_placement() for this source
        dst_width: Target canvas width
        dst_height: Target canvas height
        mode: Fit mode; contain pre-fills the canvas with background_color
        background_color: Pillow color string
        max_canvas_pixels: Optional allocation limit

    Returns:
        New image of exactly dst_width x dst_height

    Raises:
        AllocationFailure: If the canvas or the resized region cannot be allocated
    """
    mode = FitMode(mode)
    pixel_mode = working_mode(source)
    fill = background_color if (mode.fills_background or placement.fill_background) else None

    canvas = allocate_canvas(
        pixel_mode,
        dst_width,
        dst_height,
        fill=fill,
        max_pixels=max_canvas_pixels,
    )

    x0, x1 = _pixel_span(max(placement.offset_x, 0.0), min(placement.right, dst_width), dst_width)
    y0, y1 = _pixel_span(max(placement.offset_y, 0.0), min(placement.bottom, dst_height), dst_height)

    src_left, src_right = _source_span(
        x0, x1, placement.offset_x, placement.draw_width / source.width, source.width
    )
    src_top, src_bottom = _source_span(
        y0, y1, placement.offset_y, placement.draw_height / source.height, source.height
    )

    working = source if source.mode == pixel_mode else source.convert(pixel_mode)

    try:
        drawn = working.resize(
            (x1 - x0, y1 - y0),
            Image.Resampling.LANCZOS,
            box=(src_left, src_top, src_right, src_bottom),
        )
    except MemoryError as exc:
        raise AllocationFailure("Out of memory while resampling") from exc

    canvas.paste(drawn, (x0, y0))
    return canvas


# ─────────────────────────────────────────────────────────────
# Encode
# ─────────────────────────────────────────────────────────────


def resolve_output_format(source_format: str | None, override: str | None = None) -> str:
    """
    Pick the Pillow format to encode with.

    An explicit override must be encodable. Otherwise the source format is
    kept when possible and PNG is used as the fallback.

    Raises:
        EncodeFailure: If the override names an unsupported format
    """
    if override:
        fmt = get_pil_format(override)
        if fmt not in ENCODABLE_FORMATS:
            raise EncodeFailure(f"Unsupported output format: {override}")
        return fmt

    if source_format and source_format.upper() in ENCODABLE_FORMATS:
        return source_format.upper()

    logger.debug(f"Source format {source_format!r} not encodable, falling back to {FALLBACK_FORMAT}")
    return FALLBACK_FORMAT


def encode_image(image: Image.Image, pil_format: str, *, quality: int = 92) -> bytes:
    """
    Serialize a canvas.

    Alpha is kept only when the output format supports it.

    Raises:
        EncodeFailure: If the format is unsupported or the encoder fails
    """
    fmt = get_pil_format(pil_format)
    if fmt not in ENCODABLE_FORMATS:
        raise EncodeFailure(f"Unsupported output format: {pil_format}")

    # JPEG and BMP do not support an alpha channel
    if image.mode in ("RGBA", "LA") and fmt not in ALPHA_FORMATS:
        image = image.convert("RGB")

    save_kwargs: dict[str, object] = {}
    if fmt in ("JPEG", "WEBP"):
        save_kwargs["quality"] = quality
    if fmt == "PNG":
        save_kwargs["optimize"] = True

    buffer = BytesIO()
    try:
        image.save(buffer, format=fmt, **save_kwargs)
    except MemoryError as exc:
        raise AllocationFailure("Out of memory while encoding image") from exc
    except (OSError, ValueError, KeyError, TypeError) as exc:
        raise EncodeFailure(f"Failed to encode {fmt}: {exc}") from exc

    return buffer.getvalue()


# ─────────────────────────────────────────────────────────────
# Composition
# ─────────────────────────────────────────────────────────────


@timed
def fit_decoded(
    decoded: DecodedImage,
    request: FitRequest,
    *,
    max_canvas_pixels: int | None = None,
) -> FitResult:
    """Resolve, resample and encode an already decoded image."""
    placement = resolve_placement(
        decoded.width,
        decoded.height,
        request.target_width,
        request.target_height,
        request.fit_mode,
    )

    canvas = resample(
        decoded.image,
        placement,
        request.target_width,
        request.target_height,
        request.fit_mode,
        request.background_color,
        max_canvas_pixels=max_canvas_pixels,
    )

    fmt = resolve_output_format(decoded.format, request.output_format)
    payload = encode_image(canvas, fmt, quality=request.quality)

    return FitResult(
        data=payload,
        format=fmt,
        mime_type=get_mime_type(fmt),
        width=canvas.width,
        height=canvas.height,
    )


def fit_image(
    data: bytes,
    request: FitRequest,
    *,
    max_canvas_pixels: int | None = None,
) -> FitResult:
    """
    Fit encoded image bytes to the requested canvas.

    Framework-agnostic, single-image operation.

    Raises:
        DecodeFailure: If the source cannot be decoded
        EncodeFailure: If the output cannot be encoded
        AllocationFailure: If a pixel buffer cannot be allocated
    """
    return fit_decoded(decode_image(data), request, max_canvas_pixels=max_canvas_pixels)
