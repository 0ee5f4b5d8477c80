"""
Logging infrastructure for Compass.

Provides component-bound loguru loggers and one-time sink setup.
"""

from .logger import (
    CompassLogger,
    get_compass_logger,
    initialize_logging,
    get_logger_instance,
    log_repository_operation,
)

__all__ = [
    "CompassLogger",
    "get_compass_logger",
    "initialize_logging",
    "get_logger_instance",
    "log_repository_operation",
]
