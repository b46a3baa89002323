"""Batch orchestrator - runs the fit task over registry items."""

import asyncio
from collections.abc import Sequence

from loguru import logger

from .common.compute_module import ComputeModule
from .common.item_registry import ItemRegistry
from .common.schema_fit import FitRequest
from .common.schema_item import ImageItem, ItemStatus
from .plugins.image_fit.task import ImageFitTask

DEFAULT_MAX_WORKERS = 4


class BatchOrchestrator:
    """Applies a compute module to every queued item independently.

    Responsibilities:
    - Resets done/error items for an explicit re-run
    - Claims pending items atomically (items processing in another run are skipped)
    - Runs items concurrently on worker threads, bounded by max_workers
    - Writes each item's outcome back as one atomic registry update
    - Reverts unfinished items to pending when the run is cancelled

    Example:
        registry = InMemoryItemRegistry()
        orchestrator = BatchOrchestrator(registry)

        request = FitRequest(target_width=1080, target_height=1080, fit_mode="cover")
        items = await orchestrator.run_batch(request)
    """

    def __init__(
        self,
        registry: ItemRegistry,
        task: ComputeModule | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """Initialize orchestrator.

        Args:
            registry: ItemRegistry implementation
            task: Compute module applied per item. Defaults to ImageFitTask.
            max_workers: Upper bound of items processed at the same time
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.registry: ItemRegistry = registry
        self.task: ComputeModule = task if task is not None else ImageFitTask()
        self.max_workers: int = max_workers

    def prepare(self, item_ids: Sequence[str]) -> list[str]:
        """Reset terminal items and claim every pending one.

        Returns:
            Ids now in processing and owned by this run
        """
        for item_id in item_ids:
            item = self.registry.get_item(item_id)
            if item is not None and item.status.is_terminal:
                _ = self.registry.reset_item(item_id)

        return self.registry.claim_items(item_ids)

    async def _process_one(self, item_id: str, request: FitRequest, semaphore: asyncio.Semaphore) -> None:
        async with semaphore:
            item = self.registry.get_item(item_id)
            if item is None or item.status != ItemStatus.processing:
                # removed or cleared mid-run
                return

            update = await asyncio.to_thread(self.task.execute, item, request)

            if not self.registry.update_item(item_id, update):
                logger.debug(f"Item {item_id} vanished before its result was stored")

    async def run_batch(
        self,
        request: FitRequest,
        item_ids: Sequence[str] | None = None,
    ) -> list[ImageItem]:
        """Process items and return their final snapshots.

        Args:
            request: Shared, read-only fit request
            item_ids: Items to process. If None, every registered item.

        Returns:
            Snapshots of the requested items that still exist, in request order.
            Every claimed item ends in done or error.
        """
        ids = (
            list(item_ids)
            if item_ids is not None
            else [item.item_id for item in self.registry.list_items()]
        )

        claimed = self.prepare(ids)
        logger.info(
            f"Batch started: {len(claimed)}/{len(ids)} items, "
            + f"{request.target_width}x{request.target_height} {request.fit_mode.value}"
        )

        semaphore = asyncio.Semaphore(self.max_workers)
        try:
            outcomes = await asyncio.gather(
                *(self._process_one(item_id, request, semaphore) for item_id in claimed),
                return_exceptions=True,
            )
        except asyncio.CancelledError:
            reverted = sum(self.registry.release_item(item_id) for item_id in claimed)
            logger.warning(f"Batch cancelled, {reverted} unfinished items reverted to pending")
            raise

        for item_id, outcome in zip(claimed, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Storing the outcome of item {item_id} failed: {outcome}")
                # never leave an item stuck in processing
                _ = self.registry.release_item(item_id)

        items = [item for item_id in ids if (item := self.registry.get_item(item_id)) is not None]

        done = sum(1 for item in items if item.status == ItemStatus.done)
        failed = sum(1 for item in items if item.status == ItemStatus.error)
        logger.info(f"Batch finished: {done} done, {failed} error")

        return items

    def run_batch_sync(
        self,
        request: FitRequest,
        item_ids: Sequence[str] | None = None,
    ) -> list[ImageItem]:
        """Blocking variant of run_batch() for callers without an event loop."""
        return asyncio.run(self.run_batch(request, item_ids))
