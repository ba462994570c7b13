"""
Common utilities package for the TV show scraper.

This package contains configuration, logging and filesystem helpers shared by
the scraping pipeline.
"""

from .constants import (
    CATALOG_KIND_TV,
    DEFAULT_LOG_LEVEL,
    LOG_DIR,
    MARKER_FILE_NAME,
    NFO_FILE_NAME,
    VIDEO_EXTENSIONS,
)
from .file_manager import (
    FileOperationError,
    ensure_directory_exists,
    list_show_directories,
    place_episode,
    scan_media_files,
    write_text_atomic,
)
from .logger import setup_logging
from .settings import ConfigError, Settings, load_settings

__all__ = [
    # Constants
    "CATALOG_KIND_TV",
    "DEFAULT_LOG_LEVEL",
    "LOG_DIR",
    "MARKER_FILE_NAME",
    "NFO_FILE_NAME",
    "VIDEO_EXTENSIONS",
    # File manager
    "FileOperationError",
    "ensure_directory_exists",
    "list_show_directories",
    "place_episode",
    "scan_media_files",
    "write_text_atomic",
    # Logger
    "setup_logging",
    # Settings
    "ConfigError",
    "Settings",
    "load_settings",
]
