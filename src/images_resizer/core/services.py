"""Event handling and per-object processing for the images resizer."""

import functools
import time
from typing import Any, Dict, Iterable, Optional

from .exceptions import ImagesResizerError, NotificationError, SameBucketError
from .fanout import FanOutCoordinator
from .image_utils import decode_image, is_supported_key
from .models import ObjectMetadata, ProcessingResult, ResizeSpec, ResizerConfig, S3EventRecord
from .notifier import build_payload
from .observability import LogContext
from .protocols import LoggerProtocol, NotifierProtocol
from .sizes import DEFAULT_SIZES, validate_sizes
from .storage import S3ObjectStore


class ImageResizeService:
    """Turns S3 upload events into resized derivatives and notifications."""

    def __init__(
        self,
        store: S3ObjectStore,
        config: ResizerConfig,
        notifier: NotifierProtocol,
        logger: LoggerProtocol,
        coordinator: Optional[FanOutCoordinator] = None,
        sizes: Iterable[ResizeSpec] = DEFAULT_SIZES,
    ):
        self._store = store
        self._config = config
        self._notifier = notifier
        self._logger = logger
        self._coordinator = coordinator or FanOutCoordinator(config.max_concurrency)
        self._sizes = validate_sizes(sizes)

    def handle_event(self, event: Dict[str, Any]) -> Dict[str, int]:
        """
        Process every record of an S3 event in order.

        Records with unsupported extensions are skipped. The first failing
        record stops the event and its error is re-raised so the platform can
        redeliver the batch.
        """
        records = event.get("Records") or []
        processed = 0
        skipped = 0

        for raw_record in records:
            record = S3EventRecord.from_record(raw_record)
            if not is_supported_key(record.key):
                self._logger.warning("Skipping non-image file", key=record.key)
                skipped += 1
                continue

            try:
                self.process_record(record.bucket, record.key)
            except ImagesResizerError as e:
                self._logger.error(
                    f"Error processing image {record.key}: {e}", bucket=record.bucket
                )
                raise
            except Exception as e:
                self._logger.error(
                    f"Unexpected error processing image {record.key}: {e}",
                    bucket=record.bucket,
                )
                raise
            processed += 1

        return {"records": len(records), "processed": processed, "skipped": skipped}

    def process_record(self, bucket: str, key: str) -> ProcessingResult:
        """
        Produce and upload every derivative of one object, then notify.

        Raises:
            SameBucketError: Source bucket is the destination bucket
            S3Error: Download failed
            ImageDecodeError: Object is not a supported image
            DerivativeError: Any derivative failed to resize, encode or upload
        """
        dest_bucket = self._config.destination_bucket
        log_context = LogContext(
            operation="process_image", component="image_resize_service"
        ).with_metadata(bucket=bucket, key=key)

        # Writing back into the source bucket would re-trigger this handler
        if bucket == dest_bucket:
            raise SameBucketError(bucket)

        start_time = time.time()

        self._logger.debug("Downloading image", log_context.with_operation("download_image"))
        stored = self._store.get(bucket, key)
        metadata = ObjectMetadata.from_s3_metadata(stored.metadata)

        image = decode_image(stored.body)
        width, height = image.size
        self._logger.debug(
            "Decoded image",
            log_context.with_operation("decode_image"),
            format=image.source_format.value,
            width=width,
            height=height,
        )

        derivatives = self._coordinator.run(
            image, key, self._sizes, functools.partial(self._store.put, dest_bucket)
        )

        result = ProcessingResult(
            source_bucket=bucket,
            source_key=key,
            dest_bucket=dest_bucket,
            derivatives=derivatives,
        )
        result.notified = self._notify(bucket, key, metadata, log_context)
        result.processing_time = time.time() - start_time

        self._logger.info(
            "Successfully processed image",
            log_context,
            sizes=len(derivatives),
            processing_time_ms=round(result.processing_time * 1000, 1),
        )
        return result

    def _notify(
        self, bucket: str, key: str, metadata: ObjectMetadata, log_context: LogContext
    ) -> bool:
        """Deliver the notification; failures are logged and never raised."""
        if not self._notifier.is_configured:
            return False

        notify_context = log_context.with_operation("notify")
        payload = build_payload(
            key,
            bucket,
            self._config.destination_bucket,
            self._sizes,
            self._config,
            metadata=metadata,
        )
        try:
            self._notifier.deliver(payload)
        except NotificationError as e:
            self._logger.error(f"Failed to send webhook notification: {e}", notify_context)
            return False

        self._logger.info("Webhook notification sent", notify_context)
        return True
