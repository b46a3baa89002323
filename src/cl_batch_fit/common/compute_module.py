"""ComputeModule - Abstract base class for per-item compute tasks."""

from abc import ABC, abstractmethod

from loguru import logger

from .errors import AllocationFailure, BatchFitError
from .schema_fit import FitRequest
from .schema_item import FitResult, ImageItem, ImageItemUpdate, ItemStatus


class ComputeModule(ABC):
    """
    Stateless, template-method based compute module.

    - run() does the work for one item and may raise
    - execute() owns the item boundary: it never raises, every failure
      becomes an error update for that item only
    """

    @property
    @abstractmethod
    def task_type(self) -> str: ...

    def setup(self) -> None:
        """Optional per-execution setup."""
        pass

    @abstractmethod
    def run(self, item: ImageItem, request: FitRequest) -> tuple[FitResult, tuple[int, int]]:
        """
        Execute task for one item.

        Returns:
            The fit result and the item's natural (width, height)
        """
        ...

    def execute(self, item: ImageItem, request: FitRequest) -> ImageItemUpdate:
        try:
            self.setup()

            result, (width, height) = self.run(item, request)

            return ImageItemUpdate(
                status=ItemStatus.done,
                original_width=width,
                original_height=height,
                result=result,
            )

        except BatchFitError as exc:
            logger.warning(f"{self.task_type}: item {item.item_id} ({item.name}) failed: {exc}")
            return ImageItemUpdate(
                status=ItemStatus.error,
                error_message=f"{type(exc).__name__}: {exc}",
            )

        except MemoryError:
            logger.error(f"{self.task_type}: item {item.item_id} ({item.name}) ran out of memory")
            return ImageItemUpdate(
                status=ItemStatus.error,
                error_message=f"{AllocationFailure.__name__}: out of memory",
            )

        except Exception as exc:
            logger.exception(f"{self.task_type}: unexpected failure on item {item.item_id}")
            return ImageItemUpdate(
                status=ItemStatus.error,
                error_message=f"{type(exc).__name__}: {exc}",
            )
