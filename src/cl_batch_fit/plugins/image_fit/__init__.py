"""Image fit plugin."""

from .task import ImageFitTask

__all__ = ["ImageFitTask"]
