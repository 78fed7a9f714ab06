"""Shared data models for the images resizer."""

import os
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import ConfigurationError, EventParseError


class ImageFormat(str, Enum):
    """Source formats the codec understands."""

    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"


class FitStrategy(str, Enum):
    """How a raster is mapped onto a ResizeSpec's target box."""

    FIT = "fit"
    FILL = "fill"
    RESIZE_BY_WIDTH = "resize_by_width"
    RESIZE_BY_HEIGHT = "resize_by_height"


class ResizeSpec(BaseModel):
    """A named derivative size."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    strategy: FitStrategy = FitStrategy.FIT

    @model_validator(mode="after")
    def check_dimensions(self) -> "ResizeSpec":
        if self.strategy in (FitStrategy.FIT, FitStrategy.FILL):
            if self.width <= 0 or self.height <= 0:
                raise ValueError(
                    f"{self.strategy.value} size '{self.name}' needs a positive width and height"
                )
        elif self.strategy is FitStrategy.RESIZE_BY_WIDTH and self.width <= 0:
            raise ValueError(f"size '{self.name}' needs a positive width")
        elif self.strategy is FitStrategy.RESIZE_BY_HEIGHT and self.height <= 0:
            raise ValueError(f"size '{self.name}' needs a positive height")
        return self


class ObjectMetadata(BaseModel):
    """User metadata attached to an uploaded source object."""

    brand_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    requested_by: Optional[str] = None
    existing_file: Optional[str] = None

    @property
    def is_replacement(self) -> bool:
        return bool(self.existing_file)

    @classmethod
    def from_s3_metadata(cls, metadata: Optional[Mapping[str, str]]) -> "ObjectMetadata":
        """Read the known keys, ignoring case (boto3 lower-cases user metadata)."""
        lowered = {k.lower(): v for k, v in (metadata or {}).items()}

        def value(name: str) -> Optional[str]:
            return lowered.get(name) or None

        return cls(
            brand_id=value("brandid"),
            entity_type=value("entitytype"),
            entity_id=value("entityid"),
            requested_by=value("requestedby"),
            existing_file=value("existingfile"),
        )


class ProcessedDerivative(BaseModel):
    """One uploaded derivative."""

    name: str
    key: str
    width: int
    height: int
    content_type: str


class ProcessingResult(BaseModel):
    """Outcome of processing a single source object."""

    source_bucket: str
    source_key: str
    dest_bucket: str
    derivatives: List[ProcessedDerivative] = Field(default_factory=list)
    notified: bool = False
    processing_time: float = 0.0


class ImageSizeInfo(BaseModel):
    """A derivative entry in the webhook payload."""

    name: str
    url: str
    key: str
    width: int
    height: int


class NotificationPayload(BaseModel):
    """Body of the image_processed webhook."""

    original_file: str
    original_url: str
    bucket: str
    processed_at: str
    environment: str
    total_sizes: int
    image_sizes: List[ImageSizeInfo]
    event_type: str = "image_processed"
    brand_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    requested_by: Optional[str] = None
    is_replacement: bool = False


class S3EventRecord(BaseModel):
    """The bucket/key pair named by one S3 notification record."""

    bucket: str
    key: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "S3EventRecord":
        s3_info = record.get("s3") or {}
        bucket = (s3_info.get("bucket") or {}).get("name")
        key = (s3_info.get("object") or {}).get("key")
        if not bucket or not key:
            raise EventParseError(f"Event record is missing bucket or key: {record!r}")
        # Keys arrive URL-encoded in S3 notifications
        return cls(bucket=bucket, key=unquote_plus(key))


class ResizerConfig(BaseModel):
    """Process-wide configuration, built once at startup."""

    destination_bucket: str = Field(min_length=1)
    webhook_url: Optional[str] = None
    webhook_secret: str = ""
    region: str = "us-east-1"
    environment: str = ""
    max_concurrency: Optional[int] = Field(default=None, gt=0)
    webhook_timeout: float = Field(default=30.0, gt=0)
    webhook_max_attempts: int = Field(default=3, gt=0)
    webhook_base_delay: float = Field(default=1.0, ge=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ResizerConfig":
        """
        Build the configuration from environment variables.

        Environment Variables:
            DESTINATION_BUCKET: Bucket receiving derivatives (required)
            WEBHOOK_URL: Notification endpoint; notifications are off when unset
            WEBHOOK_SECRET: HMAC key for the X-EC-Signature header
            AWS_REGION: Region used to build object URLs
            ENVIRONMENT: Deployment tag echoed in notifications
            MAX_CONCURRENCY: Upper bound on parallel derivative tasks
        """
        env = os.environ if environ is None else environ

        values: Dict[str, Any] = {
            "destination_bucket": env.get("DESTINATION_BUCKET", ""),
            "webhook_url": env.get("WEBHOOK_URL") or None,
            "webhook_secret": env.get("WEBHOOK_SECRET", ""),
            "region": env.get("AWS_REGION") or "us-east-1",
            "environment": env.get("ENVIRONMENT", ""),
        }
        if env.get("MAX_CONCURRENCY"):
            values["max_concurrency"] = env["MAX_CONCURRENCY"]

        if not values["destination_bucket"]:
            raise ConfigurationError("DESTINATION_BUCKET environment variable is required")

        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc
