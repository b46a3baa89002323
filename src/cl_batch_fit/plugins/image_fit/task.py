"""Image fit task implementation."""

from typing_extensions import override

from ...common.compute_module import ComputeModule
from ...common.schema_fit import FitRequest
from ...common.schema_item import FitResult, ImageItem
from .algo.resample import decode_image, fit_decoded


class ImageFitTask(ComputeModule):
    """Compute module fitting one queued image onto the batch canvas."""

    def __init__(self, max_canvas_pixels: int | None = None):
        self.max_canvas_pixels: int | None = max_canvas_pixels

    @property
    @override
    def task_type(self) -> str:
        return "image_fit"

    @override
    def run(self, item: ImageItem, request: FitRequest) -> tuple[FitResult, tuple[int, int]]:
        decoded = decode_image(item.source)

        # Natural dimensions are fixed the first time the source is decoded
        if item.has_dimensions:
            size = (item.original_width, item.original_height)
        else:
            size = (decoded.width, decoded.height)

        result = fit_decoded(decoded, request, max_canvas_pixels=self.max_canvas_pixels)
        return result, size
