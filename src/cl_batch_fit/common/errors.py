"""Error hierarchy for image fitting, batch processing and dimension suggestions."""


class BatchFitError(Exception):
    """Base class for all cl_batch_fit errors."""


class InvalidDimensions(BatchFitError, ValueError):
    def __init__(self, name: str, value: object):
        self.name: str = name
        self.value: object = value
        super().__init__(f"Invalid dimension '{name}': {value!r} (must be a positive integer)")


class DecodeFailure(BatchFitError):
    """Source bytes could not be decoded as an image."""


class EncodeFailure(BatchFitError):
    """Target canvas could not be serialized to the requested format."""


class AllocationFailure(BatchFitError):
    """Pixel buffer could not be allocated (reported, never retried)."""


class DimensionOracleError(BatchFitError):
    """The dimension-suggestion service failed or returned unusable data."""
