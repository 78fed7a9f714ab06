"""S3 access for the images resizer."""

from dataclasses import dataclass, field
from typing import Dict

from .error_handling import retry_s3_operation, with_error_handling
from .logging_config import get_logger
from .protocols import S3ClientProtocol


@dataclass
class StoredObject:
    """Body and user metadata of a downloaded object."""

    body: bytes
    metadata: Dict[str, str] = field(default_factory=dict)


class S3ObjectStore:
    """Thin wrapper over an S3 client with standardized errors and throttling retries."""

    def __init__(self, s3_client: S3ClientProtocol):
        self._s3_client = s3_client
        self._logger = get_logger("images-resizer.storage")

    @retry_s3_operation()
    @with_error_handling
    def get(self, bucket: str, key: str) -> StoredObject:
        """Download an object and its user metadata."""
        self._logger.debug(f"Downloading s3://{bucket}/{key}")
        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        body = response["Body"].read()
        metadata = response.get("Metadata") or {}
        self._logger.debug(f"Object metadata for s3://{bucket}/{key}: {metadata}")
        return StoredObject(body=body, metadata=dict(metadata))

    @retry_s3_operation()
    @with_error_handling
    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        """Upload bytes with an explicit content type."""
        self._logger.debug(f"Uploading s3://{bucket}/{key} ({content_type}, {len(data)} bytes)")
        self._s3_client.put_object(
            Bucket=bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
