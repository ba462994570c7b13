"""
Constants and default settings for the TV show scraper.

This module holds the fixed names, defaults and regular expressions shared by
the scraping pipeline. Values that can be overridden from the environment are
read once by ``common.settings.load_settings``.
"""

import re

from dotenv import load_dotenv

load_dotenv()

# Catalog kinds understood by the TMDb endpoints
CATALOG_KIND_TV = "tv"
CATALOG_KIND_MOVIE = "movie"
CATALOG_KINDS = {CATALOG_KIND_TV, CATALOG_KIND_MOVIE}

# Files written into every per-show destination folder
MARKER_FILE_NAME = ".processed.json"
NFO_FILE_NAME = "tvshow.nfo"

# Accepted video file extensions
VIDEO_EXTENSIONS = {".mkv", ".mp4", ".avi", ".mov", ".m4v", ".webm", ".ts", ".rmvb"}

# Fingerprint read size (1 MiB)
HASH_CHUNK_SIZE = 1024 * 1024

# Regex patterns for filename parsing
SEASON_EPISODE_REGEX = re.compile(r"[Ss](\d{1,2})[Ee](\d{1,2})")
BARE_EPISODE_REGEX = re.compile(r"(?<!\d)(\d{1,2})(?!\d)")
DEFAULT_SEASON = "01"

# Built-in source-group rules; SUBGROUP_RULES entries override these by label
DEFAULT_SUBGROUP_RULES = {
    "LoliSub": [
        r"\[LoliSub\]\s*-\s*S(\d{2})E(\d{2})",
        r"\[LoliSub\]\s*-\s*(\d{2})",
    ],
}

# TMDb API configuration
TMDB_BASE_URL = "https://api.themoviedb.org/3"
REQUEST_TIMEOUT = 30

# Retry policy
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 0.5
DEFAULT_MAX_WORKERS = 0  # 0 = one worker per remaining page

# Logging configuration
LOG_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "WARNING": 30, "ERROR": 40}
DEFAULT_LOG_LEVEL = "INFO"
LOG_DIR = "./.logs"
