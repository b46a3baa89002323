from enum import Enum
from typing import ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ItemStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    done = "done"
    error = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.done, ItemStatus.error)


class FitResult(BaseModel):
    """Encoded output of a successful fit."""

    data: bytes = Field(..., min_length=1, repr=False)
    format: str = Field(..., description="Pillow format name, e.g. 'PNG'")
    mime_type: str
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")


class ImageItem(BaseModel):
    """One queued image and its processing state.

    Instances are immutable snapshots; the registry replaces them wholesale
    on every transition so readers never observe a half-written item.
    """

    item_id: str
    name: str
    source: bytes = Field(..., min_length=1, repr=False)
    mime_type: str = "application/octet-stream"

    original_width: int = Field(0, ge=0)
    original_height: int = Field(0, ge=0)

    status: ItemStatus = ItemStatus.pending
    result: FitResult | None = None
    error_message: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def validate_invariants(self) -> Self:
        if (self.original_width == 0) != (self.original_height == 0):
            raise ValueError("original_width and original_height must both be zero or both positive")
        if (self.result is not None) != (self.status == ItemStatus.done):
            raise ValueError("result must be present exactly when status is 'done'")
        if self.error_message is not None and self.status != ItemStatus.error:
            raise ValueError("error_message is only allowed when status is 'error'")
        return self

    @property
    def has_dimensions(self) -> bool:
        return self.original_width > 0

    def apply(self, update: "ImageItemUpdate") -> "ImageItem":
        """Return a new validated snapshot with ``update`` applied.

        Fields explicitly set on the update win, including ``None`` so that a
        reset can drop a previous result.
        """
        data = self.model_dump()
        data.update(update.model_dump(exclude_unset=True))
        return ImageItem.model_validate(data)

    def summary(self) -> "ImageItemSummary":
        return ImageItemSummary(
            item_id=self.item_id,
            name=self.name,
            mime_type=self.mime_type,
            original_width=self.original_width,
            original_height=self.original_height,
            status=self.status,
            result_width=self.result.width if self.result else None,
            result_height=self.result.height if self.result else None,
            result_mime_type=self.result.mime_type if self.result else None,
            error_message=self.error_message,
        )


class ImageItemUpdate(BaseModel):
    status: ItemStatus | None = None
    original_width: int | None = Field(default=None, gt=0)
    original_height: int | None = Field(default=None, gt=0)
    result: FitResult | None = None
    error_message: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")


class ImageItemSummary(BaseModel):
    """Byte-free view of an item (listings, HTTP responses)."""

    item_id: str
    name: str
    mime_type: str
    original_width: int
    original_height: int
    status: ItemStatus
    result_width: int | None = None
    result_height: int | None = None
    result_mime_type: str | None = None
    error_message: str | None = None
