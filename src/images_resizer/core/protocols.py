"""Protocol definitions for dependency injection and testability."""

from typing import Any, Callable, Dict, Protocol

from .models import NotificationPayload

# (key, data, content_type) -> None, bound to the destination bucket
Uploader = Callable[[str, bytes, str], None]


class S3ClientProtocol(Protocol):
    """Protocol for the S3 client operations the resizer uses."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class NotifierProtocol(Protocol):
    """Protocol for result notification."""

    @property
    def is_configured(self) -> bool:
        ...

    def deliver(self, payload: NotificationPayload) -> None:
        """Send the payload, raising NotificationError on failure."""
        ...
