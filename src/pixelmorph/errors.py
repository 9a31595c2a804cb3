"""
Error taxonomy for pixelmorph.

Every failure raised by the core reflects invalid input and is surfaced
to the caller exactly once. Nothing in the package retries.
"""

from typing import Any


class PixelmorphError(Exception):
    """Base class for all pixelmorph errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidDimensions(PixelmorphError):
    """Width or height is not a positive integer, or the buffer size disagrees."""

    code = "INVALID_DIMENSIONS"


class ImageTooLarge(InvalidDimensions):
    """An input raster exceeds the configured maximum side length."""

    code = "IMAGE_TOO_LARGE"


class EmptySampleSet(PixelmorphError):
    """A sample set ended up with no entries."""

    code = "EMPTY_SAMPLE_SET"


class TickOrderError(PixelmorphError):
    """A simulation tick arrived with an elapsed time earlier than the last one."""

    code = "TICK_ORDER"


class RunCancelled(PixelmorphError):
    """A tick was requested on an animation run that was cancelled."""

    code = "RUN_CANCELLED"


class ProcessingError(PixelmorphError):
    """The codec collaborator failed to decode, resize or encode an image."""

    code = "PROCESSING_ERROR"


def format_error(error: BaseException) -> dict[str, Any]:
    """
    Reduce an exception to a ``{"message", "code"}`` dict for reporting.

    Unknown exceptions keep their message but get the generic code.
    """
    if isinstance(error, PixelmorphError):
        return {"message": error.message, "code": error.code}
    return {"message": str(error) or "An unexpected error occurred", "code": "UNKNOWN_ERROR"}
