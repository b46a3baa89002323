"""Pydantic schemas for fit requests and placement geometry."""

from enum import StrEnum
from typing import ClassVar

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FitMode(StrEnum):
    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"

    @property
    def fills_background(self) -> bool:
        """Only contain exposes canvas area that the image does not cover."""
        return self is FitMode.CONTAIN


# ─────────────────────────────────────────────────────────────
# Fit request (shared, read-only across a batch)
# ─────────────────────────────────────────────────────────────


class FitRequest(BaseModel):
    """Target canvas and fit policy applied to every item of a batch."""

    target_width: int = Field(..., gt=0, description="Target canvas width in pixels")
    target_height: int = Field(..., gt=0, description="Target canvas height in pixels")
    fit_mode: FitMode = Field(default=FitMode.COVER, description="cover, contain or fill")
    background_color: str = Field(
        default="#000000",
        description="Canvas fill color, used only when fit_mode is contain",
    )
    output_format: str | None = Field(
        default=None,
        description="Output format override (png, jpg, webp, ...). None keeps the source format",
    )
    quality: int = Field(default=92, ge=1, le=100, description="JPEG/WEBP output quality")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    @field_validator("background_color")
    @classmethod
    def validate_background_color(cls, v: str) -> str:
        """Accept any color string Pillow understands."""
        try:
            _ = ImageColor.getrgb(v)
        except ValueError as exc:
            raise ValueError(f"Unknown color: {v!r}") from exc
        return v

    @field_validator("output_format")
    @classmethod
    def normalize_output_format(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().lower().lstrip(".")
        return v or None


# ─────────────────────────────────────────────────────────────
# Placement geometry (derived per item)
# ─────────────────────────────────────────────────────────────


class PlacementRect(BaseModel):
    """Scaled, positioned region of target-canvas space the source is drawn onto."""

    offset_x: float
    offset_y: float
    draw_width: float = Field(..., gt=0)
    draw_height: float = Field(..., gt=0)
    fill_background: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def right(self) -> float:
        return self.offset_x + self.draw_width

    @property
    def bottom(self) -> float:
        return self.offset_y + self.draw_height
