"""cl_batch_fit - batch image fitting (cover / contain / fill) with high-quality resampling."""

from .common.compute_module import ComputeModule
from .common.dimension_oracle import DimensionOracle, DimensionSuggestion
from .common.errors import (
    AllocationFailure,
    BatchFitError,
    DecodeFailure,
    DimensionOracleError,
    EncodeFailure,
    InvalidDimensions,
)
from .common.export import ArchiveSink, ExportEntry, ZipArchiveSink
from .common.item_registry import ItemRegistry
from .common.item_registry_impl import InMemoryItemRegistry
from .common.schema_fit import FitMode, FitRequest, PlacementRect
from .common.schema_item import FitResult, ImageItem, ImageItemSummary, ImageItemUpdate, ItemStatus
from .config import BatchFitSettings, get_settings, setup_logging
from .orchestrator import BatchOrchestrator
from .plugins.image_fit.algo import fit_image, resample, resolve_placement
from .plugins.image_fit.task import ImageFitTask
from .workspace import BatchWorkspace, SuggestionOutcome

__version__ = "0.1.0"

__all__ = [
    "AllocationFailure",
    "ArchiveSink",
    "BatchFitError",
    "BatchFitSettings",
    "BatchOrchestrator",
    "BatchWorkspace",
    "ComputeModule",
    "DecodeFailure",
    "DimensionOracle",
    "DimensionOracleError",
    "DimensionSuggestion",
    "EncodeFailure",
    "ExportEntry",
    "FitMode",
    "FitRequest",
    "FitResult",
    "ImageFitTask",
    "ImageItem",
    "ImageItemSummary",
    "ImageItemUpdate",
    "InMemoryItemRegistry",
    "InvalidDimensions",
    "ItemRegistry",
    "ItemStatus",
    "PlacementRect",
    "SuggestionOutcome",
    "ZipArchiveSink",
    "__version__",
    "fit_image",
    "get_settings",
    "resample",
    "resolve_placement",
    "setup_logging",
]
