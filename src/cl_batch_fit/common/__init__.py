"""Common module - protocols, schemas, errors and base classes."""

from .compute_module import ComputeModule
from .dimension_oracle import DimensionOracle, DimensionSuggestion
from .item_registry import ItemRegistry
from .schema_fit import FitMode, FitRequest, PlacementRect
from .schema_item import FitResult, ImageItem, ImageItemUpdate, ItemStatus

__all__ = [
    "ComputeModule",
    "DimensionOracle",
    "DimensionSuggestion",
    "FitMode",
    "FitRequest",
    "FitResult",
    "ImageItem",
    "ImageItemUpdate",
    "ItemRegistry",
    "ItemStatus",
    "PlacementRect",
]
