# tests/core/test_error_handling.py

from unittest import mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from PIL import UnidentifiedImageError

from images_resizer.core.error_handling import (
    retry_call,
    retry_s3_operation,
    with_error_handling,
)
from images_resizer.core.exceptions import (
    ImageDecodeError,
    S3Error,
    SameBucketError,
)


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "PutObject")


@pytest.fixture
def mock_sleep():
    with mock.patch("images_resizer.core.error_handling.time.sleep") as sleep:
        yield sleep


@pytest.fixture
def mock_logger():
    """Mock the loggers fetched by the decorators."""
    with mock.patch("images_resizer.core.error_handling.logging") as mock_logging:
        mock_log_instance = mock.Mock()
        mock_logging.getLogger.return_value = mock_log_instance
        yield mock_log_instance


# --- @with_error_handling ---

def test_with_error_handling_logs_and_reraises(mock_logger):
    @with_error_handling
    def func_raising_error():
        raise ValueError("Original error")

    with pytest.raises(ValueError):
        func_raising_error()

    mock_logger.error.assert_called_once()
    _, kwargs = mock_logger.error.call_args
    assert kwargs.get("exc_info") is True


def test_with_error_handling_maps_client_error():
    @with_error_handling
    def s3_call():
        raise _client_error("AccessDenied")

    with pytest.raises(S3Error) as exc_info:
        s3_call()
    assert isinstance(exc_info.value.__cause__, ClientError)


def test_with_error_handling_maps_botocore_error():
    @with_error_handling
    def s3_call():
        raise EndpointConnectionError(endpoint_url="https://s3.amazonaws.com")

    with pytest.raises(S3Error):
        s3_call()


def test_with_error_handling_maps_unidentified_image():
    @with_error_handling
    def open_image():
        raise UnidentifiedImageError("cannot identify image file")

    with pytest.raises(ImageDecodeError):
        open_image()


def test_with_error_handling_passes_own_errors_through(mock_logger):
    @with_error_handling
    def guarded():
        raise SameBucketError("uploads")

    with pytest.raises(SameBucketError):
        guarded()
    mock_logger.error.assert_not_called()


# --- retry_call ---

def test_retry_call_returns_first_success(mock_sleep):
    assert retry_call(lambda: "ok") == "ok"
    mock_sleep.assert_not_called()


def test_retry_call_backs_off_exponentially(mock_sleep):
    func = mock.Mock(side_effect=[RuntimeError("1"), RuntimeError("2"), "done"])

    assert retry_call(func, max_attempts=3, initial_delay=1.0, backoff_factor=2.0) == "done"

    assert func.call_count == 3
    assert mock_sleep.call_args_list == [mock.call(1.0), mock.call(2.0)]


def test_retry_call_raises_last_error(mock_sleep):
    func = mock.Mock(side_effect=[RuntimeError("first"), RuntimeError("last")])

    with pytest.raises(RuntimeError, match="last"):
        retry_call(func, max_attempts=2)
    assert func.call_count == 2


def test_retry_call_ignores_other_exceptions(mock_sleep):
    func = mock.Mock(side_effect=KeyError("boom"))

    with pytest.raises(KeyError):
        retry_call(func, retry_on=(RuntimeError,))
    assert func.call_count == 1
    mock_sleep.assert_not_called()


def test_retry_call_respects_should_retry(mock_sleep):
    func = mock.Mock(side_effect=RuntimeError("fatal"))

    with pytest.raises(RuntimeError):
        retry_call(func, should_retry=lambda e: False)
    assert func.call_count == 1


# --- @retry_s3_operation ---

def test_retry_s3_operation_retries_throttling(mock_sleep):
    attempts = []

    @retry_s3_operation(max_attempts=3, initial_delay=1, backoff_factor=2)
    @with_error_handling
    def put():
        attempts.append(1)
        if len(attempts) < 3:
            raise _client_error("SlowDown")
        return "stored"

    assert put() == "stored"
    assert len(attempts) == 3
    assert mock_sleep.call_args_list == [mock.call(1), mock.call(2)]


def test_retry_s3_operation_gives_up_on_throttling(mock_sleep):
    @retry_s3_operation(max_attempts=2)
    @with_error_handling
    def put():
        raise _client_error("SlowDown")

    with pytest.raises(S3Error):
        put()
    assert mock_sleep.call_count == 1


def test_retry_s3_operation_does_not_retry_other_codes(mock_sleep):
    calls = []

    @retry_s3_operation()
    @with_error_handling
    def get():
        calls.append(1)
        raise _client_error("NoSuchKey")

    with pytest.raises(S3Error):
        get()
    assert len(calls) == 1
    mock_sleep.assert_not_called()
