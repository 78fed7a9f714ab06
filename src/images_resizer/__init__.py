"""Images Resizer - resized derivatives of S3 uploads with webhook notification."""

__version__ = "0.1.0"
