"""
Service Logger

Provides the per-service logger used across the Automation service.
Call init_service_logger() once at startup; everything else calls
get_service_logger().
"""

import logging
import os
from typing import Optional

_service_logger: Optional[logging.Logger] = None


def init_service_logger(service_name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Create (or reconfigure) the logger for this service.

    Args:
        service_name: Name used as the logger name and in every log line
        level: Log level name; defaults to the LOG_LEVEL environment variable

    Returns:
        The configured logger
    """
    global _service_logger

    level_name = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
        ))
        logger.addHandler(handler)

    _service_logger = logger
    return logger


def get_service_logger() -> logging.Logger:
    """Get the service logger, initializing it with defaults if needed."""
    if _service_logger is None:
        return init_service_logger(os.environ.get('SERVICE_NAME', 'automation'))
    return _service_logger
