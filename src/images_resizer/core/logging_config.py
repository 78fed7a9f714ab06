"""Centralized logging configuration for the images resizer."""

import os
import sys
import logging
from typing import Optional

_FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    # CloudWatch stamps every line already
    "lambda": "%(levelname)-8s | %(name)s | %(funcName)s() | %(message)s",
}


def _default_format() -> str:
    if os.getenv("AWS_LAMBDA_FUNCTION_NAME"):
        return "lambda"
    return "structured"


def setup_logger(
    name: str = "images-resizer",
    level: Optional[str] = None,
    format_type: Optional[str] = None,
) -> logging.Logger:
    """
    Setup centralized logging with environment variable configuration.

    Args:
        name: Logger name (defaults to "images-resizer")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured", "simple" or "lambda").
            Defaults to "lambda" inside a Lambda runtime, "structured" elsewhere.

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type, overrides format_type
    """
    logger = logging.getLogger(name)

    if level:
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        env_level = os.getenv("LOG_LEVEL", "INFO").upper()
        log_level = getattr(logging, env_level, logging.INFO)

    logger.setLevel(log_level)

    # Avoid duplicate handlers on warm Lambda containers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)

        env_format = os.getenv("LOG_FORMAT", format_type or _default_format()).lower()
        fmt = _FORMATS.get(env_format, _FORMATS["structured"])
        if env_format == "lambda":
            formatter = logging.Formatter(fmt)
        else:
            formatter = logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S")

        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = "images-resizer") -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return setup_logger(name)


logger = setup_logger()
