"""
Unit tests for logging infrastructure.

Tests CompassLogger sinks, component binding and repository operation logging.
"""

import tempfile
from pathlib import Path

from loguru import logger

from compass.config import LogConfig
from compass.logging import (
    CompassLogger,
    get_compass_logger,
    get_logger_instance,
    initialize_logging,
    log_repository_operation,
)


class TestCompassLogger:
    """Tests for CompassLogger class."""

    def test_logger_initialization(self) -> None:
        """Test logger initialization."""
        with tempfile.TemporaryDirectory() as tmpdir:
            compass_logger = CompassLogger(
                log_dir=Path(tmpdir),
                level="INFO",
                enable_file_logging=False,
            )
            assert compass_logger.log_dir == Path(tmpdir)
            assert compass_logger.level == "INFO"
            assert len(compass_logger.handler_ids) == 1
            compass_logger.shutdown()

    def test_file_logging_creates_directory(self) -> None:
        """Test that file logging creates the log directory and files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "logs"
            compass_logger = CompassLogger(
                log_dir=log_dir,
                enable_file_logging=True,
                enable_console_logging=False,
            )
            assert log_dir.exists()

            get_compass_logger("persistence").error("write failed")
            get_compass_logger("engine").info("committed")
            compass_logger.shutdown()

            assert "write failed" in (log_dir / "persistence.log").read_text()
            assert "committed" not in (log_dir / "persistence.log").read_text()
            assert "committed" in (log_dir / "compass.log").read_text()
            assert "write failed" in (log_dir / "errors.log").read_text()

    def test_get_component_logger(self) -> None:
        """Test getting a component-specific logger."""
        compass_logger = CompassLogger(enable_file_logging=False)
        assert compass_logger.get_logger("engine") is not None
        compass_logger.shutdown()

    def test_from_config(self) -> None:
        """Test building a logger from a LogConfig."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_config = LogConfig(level="DEBUG", log_dir=tmpdir)
            compass_logger = CompassLogger.from_config(log_config)

            assert compass_logger.level == "DEBUG"
            assert compass_logger.log_dir == Path(tmpdir)
            compass_logger.shutdown()
            assert compass_logger.handler_ids == []


class TestComponentLogging:
    """Tests for component binding."""

    def test_component_is_bound(self) -> None:
        """Test records carry the component they were logged from."""
        records = []
        handler_id = logger.add(lambda message: records.append(message.record))
        try:
            get_compass_logger("engine").info("hello")
        finally:
            logger.remove(handler_id)

        assert records[-1]["extra"]["component"] == "engine"

    def test_log_repository_operation(self) -> None:
        """Test structured context is attached to operation records."""
        records = []
        handler_id = logger.add(
            lambda message: records.append(message.record), level="DEBUG"
        )
        try:
            log_repository_operation(
                get_compass_logger("engine"),
                "commit",
                entity_id="scene-1",
                commit_id="abc12345",
            )
        finally:
            logger.remove(handler_id)

        record = records[-1]
        assert record["message"] == "Repository operation: commit"
        assert record["extra"]["operation"] == "commit"
        assert record["extra"]["entity_id"] == "scene-1"
        assert record["extra"]["commit_id"] == "abc12345"
        assert "timestamp" in record["extra"]

    def test_message_braces_are_safe(self) -> None:
        """Test that user text containing braces is logged verbatim."""
        records = []
        handler_id = logger.add(lambda message: records.append(message.record))
        try:
            get_compass_logger("engine").info('Committed abc - "{not a field}"')
        finally:
            logger.remove(handler_id)

        assert records[-1]["message"] == 'Committed abc - "{not a field}"'


class TestInitializeLogging:
    """Tests for the global logger instance."""

    def test_initialize_replaces_previous_instance(self) -> None:
        """Test repeated initialization shuts down the previous sinks."""
        first = initialize_logging(LogConfig())
        second = initialize_logging(LogConfig(level="WARNING"))

        assert get_logger_instance() is second
        assert first.handler_ids == []
        assert second.level == "WARNING"
        second.shutdown()
