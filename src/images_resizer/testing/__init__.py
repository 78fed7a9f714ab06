"""Testing utilities and fakes for the images resizer."""

from .fakes import (
    FakeLogger,
    FakeNotifier,
    FakeS3Client,
    S3Bucket,
    S3Object,
    create_test_image,
    setup_test_s3_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeLogger",
    "FakeNotifier",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "setup_test_s3_environment",
]
