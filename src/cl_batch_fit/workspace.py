"""Workspace - control layer tying ingestion, batch runs, suggestions and export."""

import threading
from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import ClassVar

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .common.dimension_oracle import DimensionOracle, DimensionSuggestion
from .common.errors import BatchFitError, DimensionOracleError
from .common.export import ArchiveSink, ExportEntry, build_archive, export_item, export_items
from .common.item_registry import ItemRegistry
from .common.item_registry_impl import InMemoryItemRegistry
from .common.schema_fit import FitRequest
from .common.schema_item import ImageItem
from .config import BatchFitSettings, get_settings
from .messages import get_message
from .orchestrator import BatchOrchestrator
from .plugins.image_fit.algo.resample import read_dimensions
from .plugins.image_fit.task import ImageFitTask
from .utils.media_types import determine_mime


class SuggestionStatus(StrEnum):
    APPLIED = "applied"
    EMPTY_QUERY = "empty_query"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


class SuggestionOutcome(BaseModel):
    """What happened to the current request after asking the oracle."""

    status: SuggestionStatus
    applied: bool
    request: FitRequest
    suggestion: DimensionSuggestion | None = None
    message: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class BatchWorkspace:
    """
    One user's batch: the queued items plus the current target settings.

    The dimension oracle is an injected capability; its failure only yields
    a localized message and never touches the request or any item.
    """

    def __init__(
        self,
        *,
        settings: BatchFitSettings | None = None,
        registry: ItemRegistry | None = None,
        orchestrator: BatchOrchestrator | None = None,
        oracle: DimensionOracle | None = None,
    ):
        self.settings: BatchFitSettings = settings if settings is not None else get_settings()
        self.registry: ItemRegistry = registry if registry is not None else InMemoryItemRegistry()
        self.orchestrator: BatchOrchestrator = (
            orchestrator
            if orchestrator is not None
            else BatchOrchestrator(
                self.registry,
                task=ImageFitTask(max_canvas_pixels=self.settings.max_canvas_pixels),
                max_workers=self.settings.max_workers,
            )
        )
        self.oracle: DimensionOracle | None = oracle

        self._request: FitRequest = self.settings.default_request()
        self._request_lock: threading.Lock = threading.Lock()

    def message(self, key: str) -> str:
        return get_message(key, self.settings.locale)

    # ------------------------------------------------------------------
    # Target settings
    # ------------------------------------------------------------------

    @property
    def request(self) -> FitRequest:
        with self._request_lock:
            return self._request

    def update_request(self, **changes: object) -> FitRequest:
        """Replace fields of the current request.

        Raises:
            pydantic.ValidationError: If the resulting request is invalid;
                the current request is left unchanged
        """
        with self._request_lock:
            data = self._request.model_dump()
            data.update(changes)
            self._request = FitRequest.model_validate(data)
            return self._request

    async def suggest_dimensions(self, query: str) -> SuggestionOutcome:
        """Ask the oracle for dimensions and apply them on success."""
        if not query.strip():
            return SuggestionOutcome(
                status=SuggestionStatus.EMPTY_QUERY,
                applied=False,
                request=self.request,
                message=self.message("suggestion_query_empty"),
            )

        if self.oracle is None:
            return SuggestionOutcome(
                status=SuggestionStatus.UNAVAILABLE,
                applied=False,
                request=self.request,
                message=self.message("oracle_unavailable"),
            )

        try:
            suggestion = await self.oracle.suggest_dimensions(query)
        except DimensionOracleError as exc:
            logger.warning(f"Dimension suggestion failed for {query!r}: {exc}")
            return SuggestionOutcome(
                status=SuggestionStatus.FAILED,
                applied=False,
                request=self.request,
                message=self.message("suggestion_failed"),
            )

        request = self.update_request(target_width=suggestion.width, target_height=suggestion.height)
        return SuggestionOutcome(
            status=SuggestionStatus.APPLIED, applied=True, request=request, suggestion=suggestion
        )

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def ingest(self, files: Iterable[tuple[str, bytes]]) -> list[str]:
        """Register raw encoded images under their display names.

        Undecodable or oversized images are accepted; they fail at processing time.

        Raises:
            ValueError: If any buffer is empty (nothing is registered then)
        """
        batch = list(files)
        for name, data in batch:
            if not data:
                raise ValueError(f"Empty image data for {name!r}")

        item_ids: list[str] = []
        for name, data in batch:
            try:
                width, height = read_dimensions(data)
            except BatchFitError as exc:
                logger.debug(f"Dimensions of {name!r} unknown until processing: {exc}")
                width, height = 0, 0

            item_ids.append(
                self.registry.add_item(
                    name,
                    data,
                    mime_type=determine_mime(data),
                    original_width=width,
                    original_height=height,
                )
            )

        logger.info(f"Ingested {len(item_ids)} images")
        return item_ids

    def get(self, item_id: str) -> ImageItem | None:
        return self.registry.get_item(item_id)

    def list_items(self) -> list[ImageItem]:
        return self.registry.list_items()

    def remove(self, item_id: str) -> bool:
        return self.registry.remove_item(item_id)

    def clear_all(self) -> int:
        return self.registry.clear()

    async def run_batch(self, item_ids: Sequence[str] | None = None) -> list[ImageItem]:
        return await self.orchestrator.run_batch(self.request, item_ids)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, item_id: str) -> ExportEntry | None:
        item = self.registry.get_item(item_id)
        if item is None:
            return None
        return export_item(item)

    def export_all(self, *, archive: bool = False) -> list[ExportEntry]:
        return export_items(self.registry.list_items(), archive=archive)

    def build_archive(self, sink: ArchiveSink | None = None) -> bytes | None:
        """ZIP of every done item, None when there is nothing to export."""
        entries = self.export_all(archive=True)
        if not entries:
            return None
        return build_archive(entries, sink)
