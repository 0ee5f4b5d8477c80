"""
Configuration management for Compass.

This module provides centralized configuration for all components:
- Storage locations for repositories and the working document
- Engine defaults (branch name, author fallback, log length)
- Logging settings
"""

import os
from pathlib import Path
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class StorageConfig(BaseModel):
    """Configuration for where Compass keeps its files."""

    root_dir: str = Field(
        default="Campaigns",
        description="Root directory holding one folder per campaign",
    )
    compass_folder: str = Field(
        default=".compass",
        description="Folder inside each campaign that holds repository files",
    )
    working_document_name: str = Field(
        default="CurrentScene.json",
        description="File name of the most recently saved scene",
    )

    @property
    def root_path(self) -> Path:
        """Get absolute path to the storage root."""
        return Path(self.root_dir).resolve()


class EngineConfig(BaseModel):
    """Defaults used by the Compass engine."""

    main_branch: str = Field(
        default="main", description="Name of the default branch of every repository"
    )
    default_author: str = Field(
        default="Unknown",
        description="Author recorded when no current user is available",
    )
    default_log_count: int = Field(
        default=10, gt=0, description="Number of commits returned by log()"
    )
    initial_commit_message: str = Field(
        default="Initial scene creation",
        description="Message of the root commit created by init()",
    )
    auto_save_time_format: str = Field(
        default="%H:%M:%S",
        description="strftime format used in auto-save commit messages",
    )


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> | "
        "<level>{message}</level>",
        description="Log message format",
    )
    rotation: str = Field(default="10 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default="logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for Compass."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            storage=StorageConfig(
                root_dir=os.getenv("COMPASS_ROOT_DIR", "Campaigns"),
                working_document_name=os.getenv(
                    "COMPASS_WORKING_DOCUMENT", "CurrentScene.json"
                ),
            ),
            engine=EngineConfig(
                default_author=os.getenv("COMPASS_DEFAULT_AUTHOR", "Unknown"),
                default_log_count=int(os.getenv("COMPASS_LOG_COUNT", "10")),
            ),
            logging=LogConfig(
                level=cast(
                    Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                    os.getenv("LOG_LEVEL", "INFO"),
                ),
                log_dir=os.getenv("COMPASS_LOG_DIR", "logs"),
                enable_file_logging=os.getenv("COMPASS_FILE_LOGGING", "false").lower()
                in ("1", "true", "yes"),
            ),
        )


# Global configuration instance
config = Config.from_env()
