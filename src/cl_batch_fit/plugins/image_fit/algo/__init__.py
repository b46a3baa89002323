"""Image fit algorithms."""

from .geometry import resolve_placement
from .resample import (
    DecodedImage,
    decode_image,
    encode_image,
    fit_decoded,
    fit_image,
    read_dimensions,
    resample,
    resolve_output_format,
)

__all__ = [
    "DecodedImage",
    "decode_image",
    "encode_image",
    "fit_decoded",
    "fit_image",
    "read_dimensions",
    "resample",
    "resolve_output_format",
    "resolve_placement",
]
