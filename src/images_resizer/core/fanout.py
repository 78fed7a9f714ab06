"""Bounded, cancellable fan-out of one source image into its derivatives."""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Iterable, List, Optional

from .exceptions import ConfigurationError, DerivativeError
from .image_utils import DecodedImage, derive_dest_key, encode_image, resize_image
from .logging_config import get_logger
from .models import ProcessedDerivative, ResizeSpec
from .protocols import Uploader


class _FanOutState:
    """Cancellation signal and first-error slot shared by one run's tasks."""

    def __init__(self) -> None:
        self.cancelled = threading.Event()
        self.first_error: Optional[DerivativeError] = None
        self._lock = threading.Lock()

    def record_failure(self, error: DerivativeError) -> bool:
        """Keep the error if it is the first one. Returns True when it was kept."""
        with self._lock:
            if self.first_error is not None:
                return False
            self.first_error = error
            self.cancelled.set()
            return True


class FanOutCoordinator:
    """
    Produce every derivative of a decoded image in parallel.

    At most ``max_workers`` derivatives are resized, encoded and uploaded at
    once. The first failure cancels the siblings that have not yet uploaded;
    once every task has settled that first failure is raised as a
    DerivativeError. Later failures are logged and discarded.
    """

    def __init__(self, max_workers: Optional[int] = None):
        if max_workers is not None and max_workers < 1:
            raise ConfigurationError(f"max_workers must be positive, got {max_workers}")
        self.max_workers = max_workers or os.cpu_count() or 1
        self._logger = get_logger("images-resizer.fanout")

    def run(
        self,
        image: DecodedImage,
        original_key: str,
        specs: Iterable[ResizeSpec],
        uploader: Uploader,
    ) -> List[ProcessedDerivative]:
        """
        Run one resize, encode and upload task per spec.

        Args:
            image: Decoded source, shared read-only by all tasks
            original_key: Key of the source object, used to derive destination keys
            specs: Sizes to produce
            uploader: Callable storing (key, data, content_type) in the destination bucket

        Returns:
            One ProcessedDerivative per spec, in spec order

        Raises:
            DerivativeError: The first task failure
        """
        specs = list(specs)
        if not specs:
            return []

        state = _FanOutState()
        workers = min(self.max_workers, len(specs))
        self._logger.debug(
            f"Producing {len(specs)} derivatives of {original_key} with {workers} workers"
        )

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resize") as executor:
            futures = [
                executor.submit(self._produce, image, original_key, spec, uploader, state)
                for spec in specs
            ]
            wait(futures)

        if state.first_error is not None:
            raise state.first_error

        return [future.result() for future in futures]

    def _produce(
        self,
        image: DecodedImage,
        original_key: str,
        spec: ResizeSpec,
        uploader: Uploader,
        state: _FanOutState,
    ) -> Optional[ProcessedDerivative]:
        dest_key = derive_dest_key(original_key, spec.name)
        if state.cancelled.is_set():
            self._logger.debug(f"Skipping {dest_key}: fan-out cancelled")
            return None

        try:
            resized = resize_image(image.raster, spec)
            if state.cancelled.is_set():
                return None

            encoded = encode_image(resized, image.source_format)
            if state.cancelled.is_set():
                return None

            uploader(dest_key, encoded.data, encoded.content_type)
        except Exception as exc:
            error = DerivativeError(spec.name, dest_key, exc)
            error.__cause__ = exc
            if state.record_failure(error):
                self._logger.error(f"Derivative {spec.name} failed, cancelling siblings: {exc}")
            else:
                self._logger.warning(f"Discarding later failure of {spec.name}: {exc}")
            return None

        self._logger.info(f"Successfully created {dest_key}")
        width, height = resized.size
        return ProcessedDerivative(
            name=spec.name,
            key=dest_key,
            width=width,
            height=height,
            content_type=encoded.content_type,
        )
