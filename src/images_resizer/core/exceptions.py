"""Custom exceptions for the images resizer."""

from __future__ import annotations

from typing import Optional


class ImagesResizerError(Exception):
    """Base exception for all images resizer errors."""


class ConfigurationError(ImagesResizerError):
    """Error raised for invalid configuration options."""


class EventParseError(ImagesResizerError):
    """Error raised when an event record is missing its bucket or key."""


class SameBucketError(ImagesResizerError):
    """Error raised when source and destination buckets are the same."""

    def __init__(self, bucket: str):
        super().__init__(
            f"source bucket ({bucket}) and destination bucket ({bucket}) "
            "cannot be the same to prevent infinite loops"
        )
        self.bucket = bucket


class S3Error(ImagesResizerError):
    """Error raised for S3 related failures."""


class ImageProcessingError(ImagesResizerError):
    """Error raised when decoding, resizing or encoding an image fails."""


class ImageDecodeError(ImageProcessingError):
    """The byte stream is not a supported, intact image."""


class ImageEncodeError(ImageProcessingError):
    """The encoder failed to produce output bytes."""


class UnsupportedFormatError(ImageProcessingError):
    """No encoder or resize strategy exists for the requested value."""


class DerivativeError(ImagesResizerError):
    """Producing or uploading one derivative failed."""

    def __init__(self, spec_name: str, dest_key: str, cause: Exception):
        super().__init__(
            f"failed to produce resized image {dest_key} ({spec_name}): {cause}"
        )
        self.spec_name = spec_name
        self.dest_key = dest_key
        self.cause: Optional[Exception] = cause


class NotificationError(ImagesResizerError):
    """Webhook delivery failed after all attempts."""
