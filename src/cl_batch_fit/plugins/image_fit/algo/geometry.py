"""Pure placement geometry for the three fit modes."""

from ....common.errors import InvalidDimensions
from ....common.schema_fit import FitMode, PlacementRect


def _require_positive(name: str, value: object) -> int:
    # bool is an int subclass; True is not a width
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidDimensions(name, value)
    return value


def resolve_placement(
    src_width: int,
    src_height: int,
    dst_width: int,
    dst_height: int,
    mode: FitMode | str,
) -> PlacementRect:
    """
    Compute where the source lands on the target canvas.

    Args:
        src_width: Natural width of the source image
        src_height: Natural height of the source image
        dst_width: Target canvas width
        dst_height: Target canvas height
        mode: cover (crop to fill), contain (pad to fit) or fill (stretch)

    Returns:
        PlacementRect in canvas pixel space. Cover offsets are <= 0 (content
        overflows and is clipped), contain offsets are >= 0 (background shows
        on the short axis), fill is the whole canvas.

    Raises:
        InvalidDimensions: If any dimension is not a positive integer
        ValueError: If mode is not a known fit mode
    """
    src_w = _require_positive("src_width", src_width)
    src_h = _require_positive("src_height", src_height)
    dst_w = _require_positive("dst_width", dst_width)
    dst_h = _require_positive("dst_height", dst_height)
    mode = FitMode(mode)

    if mode is FitMode.FILL:
        return PlacementRect(
            offset_x=0.0,
            offset_y=0.0,
            draw_width=float(dst_w),
            draw_height=float(dst_h),
            fill_background=False,
        )

    scale_x = dst_w / src_w
    scale_y = dst_h / src_h

    # max() crops, min() pads
    if mode is FitMode.COVER:
        width_limits = scale_x >= scale_y
    else:
        width_limits = scale_x <= scale_y

    # The limiting axis lands exactly on the canvas edge
    if width_limits:
        draw_width = float(dst_w)
        draw_height = src_h * scale_x
    else:
        draw_width = src_w * scale_y
        draw_height = float(dst_h)

    # Float rounding must not push the free axis across the canvas edge
    if mode is FitMode.COVER:
        draw_width = max(draw_width, float(dst_w))
        draw_height = max(draw_height, float(dst_h))
    else:
        draw_width = min(draw_width, float(dst_w))
        draw_height = min(draw_height, float(dst_h))

    offset_x = (dst_w - draw_width) / 2
    offset_y = (dst_h - draw_height) / 2

    if mode is FitMode.COVER:
        offset_x = min(0.0, offset_x)
        offset_y = min(0.0, offset_y)
    else:
        offset_x = max(0.0, offset_x)
        offset_y = max(0.0, offset_y)

    return PlacementRect(
        offset_x=offset_x,
        offset_y=offset_y,
        draw_width=draw_width,
        draw_height=draw_height,
        fill_background=mode.fills_background,
    )
