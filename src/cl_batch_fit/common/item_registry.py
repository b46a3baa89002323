"""ItemRegistry Protocol - interface for image item bookkeeping."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .schema_item import ImageItem, ImageItemUpdate


@runtime_checkable
class ItemRegistry(Protocol):
    """Protocol for the indexed collection of queued images.

    Implementations must make every write atomic from the perspective of a
    reader: an item is either seen before or after a transition, never half
    way through it.
    """

    def add_item(
        self,
        name: str,
        source: bytes,
        *,
        mime_type: str = "application/octet-stream",
        original_width: int = 0,
        original_height: int = 0,
    ) -> str:
        """Register a new pending item.

        Returns:
            The freshly assigned item_id (never reused)
        """
        ...

    def get_item(self, item_id: str) -> ImageItem | None:
        """Get the current snapshot of an item."""
        ...

    def list_items(self) -> list[ImageItem]:
        """Snapshots of all items in ingestion order."""
        ...

    def update_item(self, item_id: str, updates: ImageItemUpdate) -> bool:
        """Apply a result update to a processing item.

        Returns:
            True if the item was updated, False if it no longer exists or is
            not processing
        """
        ...

    def reset_item(self, item_id: str) -> bool:
        """Move a done/error item back to pending, discarding its result."""
        ...

    def claim_items(self, item_ids: Sequence[str]) -> list[str]:
        """Atomically move pending items to processing.

        Returns:
            The ids that were claimed, in request order
        """
        ...

    def release_item(self, item_id: str) -> bool:
        """Revert a processing item to pending (used on cancellation)."""
        ...

    def remove_item(self, item_id: str) -> bool:
        """Drop an item and release its source and result bytes."""
        ...

    def clear(self) -> int:
        """Drop every item. Returns how many were removed."""
        ...
