# src/images_resizer/core/error_handling.py

import functools
import logging
import time
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from botocore.exceptions import BotoCoreError, ClientError
from PIL import UnidentifiedImageError

from .exceptions import ImageDecodeError, ImagesResizerError, S3Error

RETRYABLE_S3_ERROR_CODES = (
    "SlowDown",
    "ThrottlingException",
    "RequestLimitExceeded",
    "ServiceUnavailable",
)

T = TypeVar("T")


def with_error_handling(func):
    """
    A decorator to wrap functions with standardized error handling.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except ImagesResizerError:
            raise
        except Exception as e:
            logger.error(f"Error in '{func.__name__}': {e}", exc_info=True)
            if isinstance(e, (ClientError, BotoCoreError)):
                raise S3Error(f"S3 operation failed in {func.__name__}: {e}") from e
            if isinstance(e, UnidentifiedImageError):
                raise ImageDecodeError(f"Failed to identify image in {func.__name__}: {e}") from e
            raise
    return wrapper


def retry_call(
    func: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    describe: str = "operation",
    logger: Optional[logging.Logger] = None,
) -> T:
    """
    Call ``func`` until it succeeds, sleeping with exponential backoff in between.

    The delay before attempt k (k >= 2) is ``initial_delay * backoff_factor ** (k - 2)``.
    The last error is re-raised once ``max_attempts`` is exhausted or when
    ``should_retry`` rejects it.
    """
    logger = logger or logging.getLogger(__name__)
    delay = initial_delay
    attempt = 1
    while True:
        try:
            return func()
        except retry_on as e:
            if should_retry is not None and not should_retry(e):
                logger.error(f"{describe} failed with non-retryable error: {e}")
                raise
            if attempt >= max_attempts:
                logger.error(f"{describe} failed after {max_attempts} attempts. Error: {e}")
                raise
            logger.warning(
                f"{describe} failed (attempt {attempt}/{max_attempts}). "
                f"Retrying in {delay:.2f}s. Error: {e}"
            )
            time.sleep(delay)
            delay *= backoff_factor
            attempt += 1


def _is_throttling(error: BaseException) -> bool:
    cause = error.__cause__
    if isinstance(cause, ClientError):
        return cause.response.get("Error", {}).get("Code") in RETRYABLE_S3_ERROR_CODES
    return False


def retry_s3_operation(max_attempts=3, initial_delay=1, backoff_factor=2):
    """
    Decorator to retry throttled S3 operations with exponential backoff.

    Expects the wrapped function to raise S3Error chained from a ClientError,
    which is what @with_error_handling produces.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            return retry_call(
                lambda: func(*args, **kwargs),
                max_attempts=max_attempts,
                initial_delay=initial_delay,
                backoff_factor=backoff_factor,
                retry_on=(S3Error,),
                should_retry=_is_throttling,
                describe=f"S3 operation '{func.__name__}'",
                logger=logging.getLogger(func.__module__ + '.' + func.__name__),
            )
        return wrapper
    return decorator
