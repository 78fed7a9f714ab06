"""Lambda entry point and command-line interface for the images resizer."""

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .core import ImagesResizerError, ResizerConfig
from .core.factories import ProcessingPipelineFactory
from .core.logging_config import get_logger
from .core.observability import StructuredLogger
from .core.services import ImageResizeService
from .core.sizes import DEFAULT_SIZES

_service: Optional[ImageResizeService] = None


def _get_service() -> ImageResizeService:
    # Built once per container and reused across warm invocations
    global _service
    if _service is None:
        _service = ProcessingPipelineFactory.create_service(ResizerConfig.from_env())
    return _service


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, int]:
    """Handle an S3 ObjectCreated event; errors propagate so the batch is retried."""
    return _get_service().handle_event(event)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="images-resizer",
        description="Images Resizer - produce resized derivatives of S3 images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Resize one uploaded object (destination from DESTINATION_BUCKET)
  images-resizer process --bucket uploads --key photos/beach.jpg

  # Override the destination bucket
  images-resizer process --bucket uploads --key photos/beach.jpg --dest-bucket processed

  # Show the size table
  images-resizer sizes
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser(
        "process", help="Resize one S3 object into every configured size"
    )
    process_parser.add_argument("--bucket", required=True, help="Source S3 bucket")
    process_parser.add_argument("--key", required=True, help="Source object key")
    process_parser.add_argument(
        "--dest-bucket", default=None, help="Destination S3 bucket (overrides DESTINATION_BUCKET)"
    )
    process_parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )

    subparsers.add_parser("sizes", help="List the derivative sizes")
    subparsers.add_parser("version", help="Show version information")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the images-resizer command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "process":
        logger = get_logger("images-resizer.cli")
        service_logger = StructuredLogger(
            "images-resizer.service", level="DEBUG" if args.debug else None
        )

        try:
            overrides = {"DESTINATION_BUCKET": args.dest_bucket} if args.dest_bucket else {}
            config = ResizerConfig.from_env({**os.environ, **overrides})
            service = ProcessingPipelineFactory.create_service(config, logger=service_logger)
            result = service.process_record(args.bucket, args.key)
        except ImagesResizerError as e:
            logger.error(f"Processing failed: {e}")
            return 1

        for derivative in result.derivatives:
            print(f"s3://{result.dest_bucket}/{derivative.key} {derivative.width}x{derivative.height}")
        return 0

    if args.command == "sizes":
        for spec in DEFAULT_SIZES:
            print(f"{spec.name:<10} {spec.width}x{spec.height} {spec.strategy.value}")
        return 0

    if args.command == "version":
        print("Images Resizer CLI")
        print(f"Version {__version__}")
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
