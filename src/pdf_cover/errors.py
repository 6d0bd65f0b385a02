"""Domain exceptions for cover creation."""

from typing import Optional


class CoverError(Exception):
    """Base class for cover creation failures."""


class ImageExtractionError(CoverError):
    """The first page of the source document holds no usable image."""

    def __init__(self, source: Optional[str] = None, reason: str = "No image found on the first page"):
        self.source = source
        message = f"{reason}: {source}" if source else reason
        super().__init__(message)
