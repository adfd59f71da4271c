"""Error taxonomy for the image tools pipeline."""
from __future__ import annotations


class ImageToolsError(Exception):
    """Base exception for all pipeline errors."""


class InvalidRequestError(ImageToolsError):
    """Missing or malformed input, detected before any transform or upload."""


class ResolutionError(ImageToolsError):
    """Parameters parsed fine but cannot be turned into a transform."""


class ProcessingError(ImageToolsError):
    """Decoding, transforming or encoding an image failed."""


class StorageError(ImageToolsError):
    """Uploading an artifact or signing its URL failed."""
