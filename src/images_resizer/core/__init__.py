"""Core components of the images resizer."""

from .exceptions import (
    ConfigurationError,
    DerivativeError,
    EventParseError,
    ImageDecodeError,
    ImageEncodeError,
    ImageProcessingError,
    ImagesResizerError,
    NotificationError,
    S3Error,
    SameBucketError,
    UnsupportedFormatError,
)
from .fanout import FanOutCoordinator
from .image_utils import (
    DecodedImage,
    EncodedImage,
    decode_image,
    derive_dest_key,
    encode_image,
    is_supported_key,
    resize_image,
)
from .logging_config import get_logger, setup_logger
from .models import (
    FitStrategy,
    ImageFormat,
    NotificationPayload,
    ObjectMetadata,
    ProcessedDerivative,
    ProcessingResult,
    ResizerConfig,
    ResizeSpec,
)
from .notifier import WebhookNotifier, build_payload, calculate_signature
from .services import ImageResizeService
from .sizes import DEFAULT_SIZES

__all__ = [
    "ResizerConfig",
    "ResizeSpec",
    "FitStrategy",
    "ImageFormat",
    "ObjectMetadata",
    "ProcessedDerivative",
    "ProcessingResult",
    "NotificationPayload",
    "DEFAULT_SIZES",
    "DecodedImage",
    "EncodedImage",
    "decode_image",
    "encode_image",
    "resize_image",
    "derive_dest_key",
    "is_supported_key",
    "FanOutCoordinator",
    "WebhookNotifier",
    "build_payload",
    "calculate_signature",
    "ImageResizeService",
    "setup_logger",
    "get_logger",
    "ImagesResizerError",
    "ConfigurationError",
    "EventParseError",
    "SameBucketError",
    "S3Error",
    "ImageProcessingError",
    "ImageDecodeError",
    "ImageEncodeError",
    "UnsupportedFormatError",
    "DerivativeError",
    "NotificationError",
]
