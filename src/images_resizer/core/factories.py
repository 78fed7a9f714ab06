"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3
import requests

from .fanout import FanOutCoordinator
from .models import ResizerConfig
from .notifier import WebhookNotifier
from .observability import StructuredLogger
from .protocols import LoggerProtocol, NotifierProtocol, S3ClientProtocol
from .services import ImageResizeService
from .storage import S3ObjectStore


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional configuration."""
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


class ProcessingPipelineFactory:
    """Factory for creating the complete resize service."""

    @staticmethod
    def create_service(
        config: ResizerConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        http_session: Optional[requests.Session] = None,
        notifier: Optional[NotifierProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> ImageResizeService:
        """Create a fully configured resize service."""
        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(region_name=config.region)

        if notifier is None:
            notifier = WebhookNotifier(config, session=http_session)

        if logger is None:
            logger = StructuredLogger("images-resizer.service")

        return ImageResizeService(
            store=S3ObjectStore(s3_client),
            config=config,
            notifier=notifier,
            logger=logger,
            coordinator=FanOutCoordinator(config.max_concurrency),
        )
