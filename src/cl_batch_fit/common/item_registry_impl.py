from __future__ import annotations

import threading
from collections.abc import Sequence
from typing_extensions import override
from uuid import uuid4

from loguru import logger

from .item_registry import ItemRegistry
from .schema_item import ImageItem, ImageItemUpdate, ItemStatus


class InMemoryItemRegistry(ItemRegistry):
    """
    Thread-safe in-memory implementation of ItemRegistry.

    Items are immutable snapshots keyed by id; each transition swaps the
    snapshot under a lock. Dict insertion order is ingestion order.
    """

    def __init__(self) -> None:
        self._items: dict[str, ImageItem] = {}
        self._lock: threading.RLock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._items

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    @override
    def add_item(
        self,
        name: str,
        source: bytes,
        *,
        mime_type: str = "application/octet-stream",
        original_width: int = 0,
        original_height: int = 0,
    ) -> str:
        item_id = uuid4().hex
        item = ImageItem(
            item_id=item_id,
            name=name,
            source=source,
            mime_type=mime_type,
            original_width=original_width,
            original_height=original_height,
        )
        with self._lock:
            self._items[item_id] = item
        logger.debug(f"Registered item {item_id} ({name}, {len(source)} bytes)")
        return item_id

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @override
    def get_item(self, item_id: str) -> ImageItem | None:
        with self._lock:
            return self._items.get(item_id)

    @override
    def list_items(self) -> list[ImageItem]:
        with self._lock:
            return list(self._items.values())

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @override
    def update_item(self, item_id: str, updates: ImageItemUpdate) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if item is None or item.status != ItemStatus.processing:
                return False

            if item.has_dimensions and (
                (updates.original_width not in (None, item.original_width))
                or (updates.original_height not in (None, item.original_height))
            ):
                raise ValueError(f"Original dimensions of item {item_id} are immutable")

            self._items[item_id] = item.apply(updates)
            return True

    @override
    def reset_item(self, item_id: str) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if item is None or not item.status.is_terminal:
                return False
            self._items[item_id] = item.apply(
                ImageItemUpdate(status=ItemStatus.pending, result=None, error_message=None)
            )
            return True

    @override
    def claim_items(self, item_ids: Sequence[str]) -> list[str]:
        claimed: list[str] = []
        with self._lock:
            for item_id in item_ids:
                item = self._items.get(item_id)
                if item is None or item.status != ItemStatus.pending:
                    continue
                self._items[item_id] = item.apply(ImageItemUpdate(status=ItemStatus.processing))
                claimed.append(item_id)
        return claimed

    @override
    def release_item(self, item_id: str) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if item is None or item.status != ItemStatus.processing:
                return False
            self._items[item_id] = item.apply(ImageItemUpdate(status=ItemStatus.pending))
            return True

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    @override
    def remove_item(self, item_id: str) -> bool:
        with self._lock:
            removed = self._items.pop(item_id, None)
        if removed is None:
            return False
        logger.debug(f"Removed item {item_id}")
        return True

    @override
    def clear(self) -> int:
        with self._lock:
            count = len(self._items)
            self._items.clear()
        logger.debug(f"Cleared {count} items")
        return count
