"""
Core module for teisho-downloader.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs
    - progress: Rich progress bar for the download pass

Usage:
    from teisho_downloader.core import (
        Config, load_config,
        setup_logging, get_logger,
        TeishoDownloaderError, ConfigError
    )
"""

from teisho_downloader.core.config import (
    Config,
    DownloadConfig,
    OutputConfig,
    SourceConfig,
    TaggingConfig,
    load_config,
)
from teisho_downloader.core.exceptions import (
    ConfigError,
    DownloadError,
    InferenceError,
    ListingError,
    TaggingError,
    TeishoDownloaderError,
    UnexpectedStatusError,
)
from teisho_downloader.core.logger import (
    get_logger,
    log_download_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SourceConfig",
    "OutputConfig",
    "DownloadConfig",
    "TaggingConfig",
    "load_config",
    # Exceptions
    "TeishoDownloaderError",
    "ConfigError",
    "ListingError",
    "InferenceError",
    "DownloadError",
    "UnexpectedStatusError",
    "TaggingError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_download_failure",
    "shutdown_logging",
]
