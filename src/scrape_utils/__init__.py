"""
Scrape utilities package for the TV show scraper.

This package contains the fingerprinting, marker, filename parsing and TMDb
resolution pieces of the scraping pipeline.
"""

from .chooser import ConsoleChooser, InvalidSelectionError, SelectionAbortedError
from .fingerprint import fingerprint
from .formatter import render_tvshow_nfo, sanitize_filename
from .models import CatalogCandidate, CatalogDetails, EpisodeInfo, Fingerprint, Marker
from .parser import RuleSet, build_rule_set, parse_episode
from .resolver import CatalogResolver
from .retry import RetryPolicy
from .tmdb_client import (
    MaxRetriesExceededError,
    TMDbAPIError,
    TMDbClient,
    TMDbError,
    TMDbNetworkError,
    TMDbNotFoundError,
    UnrecoverableStatusError,
)

__all__ = [
    "CatalogCandidate",
    "CatalogDetails",
    "CatalogResolver",
    "ConsoleChooser",
    "EpisodeInfo",
    "Fingerprint",
    "InvalidSelectionError",
    "Marker",
    "MaxRetriesExceededError",
    "RetryPolicy",
    "RuleSet",
    "SelectionAbortedError",
    "TMDbAPIError",
    "TMDbClient",
    "TMDbError",
    "TMDbNetworkError",
    "TMDbNotFoundError",
    "UnrecoverableStatusError",
    "build_rule_set",
    "fingerprint",
    "parse_episode",
    "render_tvshow_nfo",
    "sanitize_filename",
]
