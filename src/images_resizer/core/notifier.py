"""Webhook notification of processed images."""

import hashlib
import hmac
from datetime import datetime, timezone
from typing import Iterable, Optional

import requests

from .error_handling import retry_call
from .exceptions import NotificationError
from .image_utils import derive_dest_key
from .logging_config import get_logger
from .models import (
    ImageSizeInfo,
    NotificationPayload,
    ObjectMetadata,
    ResizeSpec,
    ResizerConfig,
)

USER_AGENT = "endless-image-processor-lambda"
SIGNATURE_HEADER = "X-EC-Signature"
EVENT_TYPE = "image_processed"
DEFAULT_REGION = "us-east-1"


def generate_file_url(bucket: str, key: str, region: str = "") -> str:
    """Build the virtual-hosted style URL of an S3 object."""
    return f"https://{bucket}.s3.{region or DEFAULT_REGION}.amazonaws.com/{key}"


def format_timestamp(moment: datetime) -> str:
    """Format as RFC3339 in UTC with second precision."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_payload(
    original_key: str,
    source_bucket: str,
    dest_bucket: str,
    specs: Iterable[ResizeSpec],
    config: ResizerConfig,
    metadata: Optional[ObjectMetadata] = None,
    now: Optional[datetime] = None,
) -> NotificationPayload:
    """
    Assemble the image_processed payload for one source object.

    Derivative keys come from derive_dest_key, the same function the
    fan-out uses for uploads, so the payload always names the real objects.

    Args:
        original_key: Key of the source object
        source_bucket: Bucket the source was uploaded to
        dest_bucket: Bucket holding the derivatives
        specs: Sizes that were produced, in order
        config: Supplies region and environment tag
        metadata: Source object annotations, if any
        now: Timestamp override, defaults to the current UTC time

    Returns:
        NotificationPayload
    """
    image_sizes = []
    for spec in specs:
        key = derive_dest_key(original_key, spec.name)
        image_sizes.append(
            ImageSizeInfo(
                name=spec.name,
                url=generate_file_url(dest_bucket, key, config.region),
                key=key,
                width=spec.width,
                height=spec.height,
            )
        )

    metadata = metadata or ObjectMetadata()
    return NotificationPayload(
        original_file=original_key,
        original_url=generate_file_url(source_bucket, original_key, config.region),
        bucket=dest_bucket,
        processed_at=format_timestamp(now or datetime.now(timezone.utc)),
        environment=config.environment,
        total_sizes=len(image_sizes),
        image_sizes=image_sizes,
        event_type=EVENT_TYPE,
        brand_id=metadata.brand_id,
        entity_type=metadata.entity_type,
        entity_id=metadata.entity_id,
        requested_by=metadata.requested_by,
        is_replacement=metadata.is_replacement,
    )


def serialize_payload(payload: NotificationPayload) -> bytes:
    """Compact JSON bytes; the signature is computed over exactly these bytes."""
    return payload.model_dump_json(exclude_none=True).encode("utf-8")


def calculate_signature(body: bytes, secret: str) -> str:
    """HMAC-SHA256 of the body as ``sha256=<hex>``; empty when there is no secret."""
    if not secret:
        return ""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


class WebhookNotifier:
    """Signs and POSTs notification payloads with bounded retries."""

    def __init__(
        self, config: ResizerConfig, session: Optional[requests.Session] = None
    ):
        self._url = config.webhook_url
        self._secret = config.webhook_secret
        self._timeout = config.webhook_timeout
        self._max_attempts = config.webhook_max_attempts
        self._base_delay = config.webhook_base_delay
        self._session = session or requests.Session()
        self._logger = get_logger("images-resizer.notifier")

    @property
    def is_configured(self) -> bool:
        return bool(self._url)

    def deliver(self, payload: NotificationPayload) -> None:
        """
        Send the payload to the configured webhook.

        A no-op when no webhook URL is configured. Any non-2xx status or
        transport error is retried; the delay doubles after each failure.

        Raises:
            NotificationError: All attempts failed
        """
        if not self.is_configured:
            self._logger.info("Webhook not configured, skipping notification")
            return

        body = serialize_payload(payload)
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            SIGNATURE_HEADER: calculate_signature(body, self._secret),
        }

        try:
            retry_call(
                lambda: self._send_once(body, headers),
                max_attempts=self._max_attempts,
                initial_delay=self._base_delay,
                backoff_factor=2.0,
                retry_on=(requests.RequestException,),
                describe="Webhook notification",
                logger=self._logger,
            )
        except requests.RequestException as exc:
            raise NotificationError(
                f"webhook notification failed after {self._max_attempts} attempts: {exc}"
            ) from exc

        self._logger.info(f"Webhook notification sent successfully to: {self._url}")

    def _send_once(self, body: bytes, headers: dict) -> None:
        response = self._session.post(
            self._url,
            data=body,
            headers=headers,
            timeout=self._timeout,
        )
        try:
            if not 200 <= response.status_code < 300:
                raise requests.HTTPError(
                    f"webhook returned non-success status: {response.status_code}",
                    response=response,
                )
        finally:
            response.close()
