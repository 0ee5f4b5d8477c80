"""
Logging setup for Compass.

Provides structured logging with:
- Component-bound loggers (engine, persistence, editor)
- Optional rotating log files
- A dedicated persistence log for storage failures
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from compass.config import LogConfig

# Records logged without a bound component still render with the default format
logger.configure(extra={"component": "compass"})


class CompassLogger:
    """
    Owns the loguru sinks used by a Compass host application.

    Features:
    - Console sink with colorized output
    - Rotating main log, persistence log and error log
    - Component binding through get_logger()
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        rotation: str = "10 MB",
        retention: str = "1 month",
        level: str = "INFO",
        format_string: Optional[str] = None,
        enable_file_logging: bool = False,
        enable_console_logging: bool = True,
    ):
        """
        Initialize the Compass logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to console
        """
        self.log_dir = log_dir or Path("logs")
        self.rotation = rotation
        self.retention = retention
        self.level = level
        self.format_string = format_string or LogConfig().format
        self.handler_ids: list[int] = []

        # Remove default handler
        logger.remove()

        if enable_console_logging:
            self.handler_ids.append(
                logger.add(
                    sys.stderr,
                    format=self.format_string,
                    level=level,
                    colorize=True,
                )
            )

        if enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._add_file_handlers()

        self.logger = logger.bind(component="compass")

    @classmethod
    def from_config(cls, log_config: LogConfig) -> "CompassLogger":
        """Build a logger from a LogConfig section."""
        return cls(
            log_dir=Path(log_config.log_dir),
            rotation=log_config.rotation,
            retention=log_config.retention,
            level=log_config.level,
            format_string=log_config.format,
            enable_file_logging=log_config.enable_file_logging,
            enable_console_logging=log_config.enable_console_logging,
        )

    def _add_file_handlers(self) -> None:
        """Add file handlers for the main, persistence and error logs."""
        self.handler_ids.append(
            logger.add(
                self.log_dir / "compass.log",
                format=self.format_string,
                level=self.level,
                rotation=self.rotation,
                retention=self.retention,
            )
        )

        # Storage reads and writes, including the ones that failed
        self.handler_ids.append(
            logger.add(
                self.log_dir / "persistence.log",
                format=self.format_string,
                level="DEBUG",
                rotation=self.rotation,
                retention=self.retention,
                filter=lambda record: record["extra"].get("component") == "persistence",
            )
        )

        self.handler_ids.append(
            logger.add(
                self.log_dir / "errors.log",
                format=self.format_string,
                level="ERROR",
                rotation=self.rotation,
                retention=self.retention,
            )
        )

    def get_logger(self, component: str) -> Any:
        """
        Get a logger bound to a specific component.

        Args:
            component: Component name (e.g., "engine", "persistence")

        Returns:
            Logger instance bound to the component
        """
        return logger.bind(component=component)

    def shutdown(self) -> None:
        """Remove the sinks this instance added."""
        for handler_id in self.handler_ids:
            logger.remove(handler_id)
        self.handler_ids = []


def get_compass_logger(component: str = "compass") -> Any:
    """
    Get a component-specific logger.

    Example:
        >>> log = get_compass_logger("engine")
        >>> log.info("Committed abc12345")
    """
    return logger.bind(component=component)


def log_repository_operation(logger_instance: Any, operation: str, **kwargs: Any) -> None:
    """
    Log a repository operation with structured context.

    Args:
        logger_instance: Logger to use
        operation: Operation name (e.g., "commit", "checkout", "revert")
        **kwargs: Additional context bound to the record
    """
    logger_instance.bind(
        operation=operation,
        timestamp=datetime.now().isoformat(),
        **kwargs,
    ).debug(f"Repository operation: {operation}")


# Global logger instance
_compass_logger: Optional[CompassLogger] = None


def initialize_logging(log_config: Optional[LogConfig] = None) -> CompassLogger:
    """
    Initialize the Compass logging sinks.

    Call once at application startup. Without an argument the global
    configuration's logging section is used.
    """
    global _compass_logger
    if log_config is None:
        from compass.config import config

        log_config = config.logging
    if _compass_logger is not None:
        _compass_logger.shutdown()
    _compass_logger = CompassLogger.from_config(log_config)
    return _compass_logger


def get_logger_instance() -> Optional[CompassLogger]:
    """Get the global logger instance."""
    return _compass_logger
