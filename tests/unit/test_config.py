"""
Unit tests for configuration system.

These tests verify that the configuration system works correctly
and can load settings from environment variables.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from compass.config import Config, EngineConfig, LogConfig, StorageConfig


def test_config_has_defaults() -> None:
    """Test that Config initializes with sensible defaults."""
    config = Config()

    assert config.storage.root_dir == "Campaigns"
    assert config.storage.compass_folder == ".compass"
    assert config.storage.working_document_name == "CurrentScene.json"

    assert config.engine.main_branch == "main"
    assert config.engine.default_author == "Unknown"
    assert config.engine.default_log_count == 10

    assert config.logging.level == "INFO"
    assert config.logging.enable_file_logging is False


def test_engine_config_defaults() -> None:
    """Test EngineConfig default values."""
    engine_config = EngineConfig()

    assert engine_config.initial_commit_message == "Initial scene creation"
    assert engine_config.auto_save_time_format == "%H:%M:%S"


def test_storage_root_path_is_absolute() -> None:
    """Test the storage root resolves to an absolute path."""
    storage = StorageConfig(root_dir="some/where")

    assert storage.root_path.is_absolute()
    assert storage.root_path == Path("some/where").resolve()


def test_log_count_must_be_positive() -> None:
    """Test that a zero log count is rejected."""
    with pytest.raises(ValidationError):
        EngineConfig(default_log_count=0)


def test_invalid_log_level() -> None:
    """Test that an unknown log level is rejected."""
    with pytest.raises(ValidationError):
        LogConfig(level="VERBOSE")  # type: ignore[arg-type]


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test loading configuration from environment variables."""
    monkeypatch.setenv("COMPASS_ROOT_DIR", "/tmp/campaigns")
    monkeypatch.setenv("COMPASS_WORKING_DOCUMENT", "Scene.json")
    monkeypatch.setenv("COMPASS_DEFAULT_AUTHOR", "Game Master")
    monkeypatch.setenv("COMPASS_LOG_COUNT", "25")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("COMPASS_LOG_DIR", "/tmp/compass-logs")
    monkeypatch.setenv("COMPASS_FILE_LOGGING", "true")

    config = Config.from_env()

    assert config.storage.root_dir == "/tmp/campaigns"
    assert config.storage.working_document_name == "Scene.json"
    assert config.engine.default_author == "Game Master"
    assert config.engine.default_log_count == 25
    assert config.logging.level == "DEBUG"
    assert config.logging.log_dir == "/tmp/compass-logs"
    assert config.logging.enable_file_logging is True


def test_config_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test from_env falls back to defaults for unset variables."""
    for name in (
        "COMPASS_ROOT_DIR",
        "COMPASS_WORKING_DOCUMENT",
        "COMPASS_DEFAULT_AUTHOR",
        "COMPASS_LOG_COUNT",
        "LOG_LEVEL",
        "COMPASS_LOG_DIR",
        "COMPASS_FILE_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)

    config = Config.from_env()

    assert config == Config()


def test_config_serialization() -> None:
    """Test that config can be serialized to dict."""
    config = Config()
    config_dict = config.model_dump()

    assert "storage" in config_dict
    assert "engine" in config_dict
    assert "logging" in config_dict
    assert config_dict["engine"]["main_branch"] == "main"
