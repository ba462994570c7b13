"""
TMDb API client for searching and fetching TV show metadata.

This module wraps the two TMDb endpoints the scraper needs, search and
details. Every request runs under the retry policy: rate limiting (429),
server errors (5xx) and connection failures are retried with exponential
backoff, any other error status fails at once. Search result pages after the
first are fetched concurrently.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional

import requests

from common.constants import CATALOG_KIND_TV, REQUEST_TIMEOUT, TMDB_BASE_URL

from .models import CatalogCandidate, CatalogDetails, SearchPage
from .retry import (
    REASON_UNRECOVERABLE,
    RETRYABLE,
    SUCCESS,
    UNRECOVERABLE,
    Outcome,
    RetryPolicy,
    Succeeded,
    run_with_retry,
)

logger = logging.getLogger(__name__)


class TMDbError(Exception):
    """Base exception for TMDb API errors."""

    pass


class TMDbAPIError(TMDbError):
    """Exception for malformed or unsuccessful API responses."""

    pass


class TMDbNetworkError(TMDbError):
    """Exception for connection-level failures."""

    pass


class UnrecoverableStatusError(TMDbError):
    """Exception for an HTTP status that retrying cannot fix."""

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"TMDb returned unrecoverable status {status_code}" + (f" for {url}" if url else ""))


class MaxRetriesExceededError(TMDbError):
    """Exception for a request that kept failing with retryable errors."""

    def __init__(self, max_retries: int, url: str = ""):
        self.max_retries = max_retries
        self.url = url
        super().__init__(f"Request failed after {max_retries} attempts" + (f": {url}" if url else ""))


class TMDbNotFoundError(TMDbError):
    """Exception for when a search returns no results."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"No TMDb results found for '{query}'")


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code <= 599


class TMDbClient:
    """Client for interacting with The Movie Database API."""

    def __init__(
            self,
            api_key: str,
            base_url: str = TMDB_BASE_URL,
            kind: str = CATALOG_KIND_TV,
            language: Optional[str] = None,
            include_adult: Optional[str] = None,
            proxy: Optional[str] = None,
            policy: Optional[RetryPolicy] = None,
            max_workers: int = 0,
            details_retry: bool = True,
            session: Optional[requests.Session] = None,
            sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the TMDb client.

        Args:
            api_key: TMDb API key
            base_url: API root, without trailing slash
            kind: Catalog kind used in endpoint paths ("tv" or "movie")
            language: Optional TMDb language code sent with every request
            include_adult: Optional include_adult flag sent with searches
            proxy: Optional proxy URL for HTTP and HTTPS
            policy: Retry policy, default 3 attempts starting at 0.5s
            max_workers: Bound on concurrent page fetches, 0 for one per page
            details_retry: Whether details requests use the retry policy
            session: Pre-built session, mainly for tests
            sleep: Sleep function used for backoff, mainly for tests
        """
        if not api_key:
            raise TMDbError("TMDb API key is required. Set TMDB_API_KEY environment variable.")

        self.base_url = base_url.rstrip("/")
        self.kind = kind
        self.include_adult = include_adult
        self.policy = policy or RetryPolicy()
        self.max_workers = max_workers
        self.details_retry = details_retry
        self.sleep = sleep

        self.session = session or requests.Session()
        self.session.params = {"api_key": api_key}
        if language:
            self.session.params["language"] = language
        if proxy:
            self.session.proxies.update({"http": proxy, "https": proxy})

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "TMDbClient":
        """Create a client from a ``common.settings.Settings`` value."""
        return cls(
            api_key=settings.api_key,
            kind=settings.catalog_kind,
            language=settings.language,
            include_adult=settings.include_adult,
            proxy=settings.proxy,
            policy=RetryPolicy(settings.max_retries, settings.retry_base_delay),
            max_workers=settings.max_workers,
            details_retry=settings.details_retry,
            **kwargs,
        )

    def _attempt(self, url: str, params: Optional[Dict[str, Any]]) -> Outcome:
        """Send one GET and classify the result."""
        # requests puts the full URL, api_key included, into its messages
        try:
            response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            return Outcome(RETRYABLE, error=TMDbNetworkError(f"{type(e).__name__} for {url}"))
        except requests.exceptions.RequestException as e:
            raise TMDbAPIError(f"{type(e).__name__} for {url}")

        status = response.status_code
        if 200 <= status < 300:
            return Outcome(SUCCESS, value=response)
        if _is_retryable_status(status):
            return Outcome(RETRYABLE, error=TMDbAPIError(f"HTTP {status}"))
        return Outcome(UNRECOVERABLE, error=UnrecoverableStatusError(status, url))

    def _make_request(self, endpoint: str, params: Optional[Dict[str, Any]] = None, retry: bool = True) -> Dict[str, Any]:
        """Make a request to the TMDb API and handle errors."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        policy = self.policy if retry else RetryPolicy(max_retries=1, base_delay=0)

        logger.debug(f"TMDb API request: {url}")
        if params:
            logger.debug(f"Request params: {params}")

        state, outcome = run_with_retry(
            lambda _attempt: self._attempt(url, params),
            policy,
            sleep=self.sleep,
            label=f"GET {endpoint}",
        )

        if not isinstance(state, Succeeded):
            if state.reason == REASON_UNRECOVERABLE:
                logger.error(f"TMDb request failed: {outcome.error}")
                raise outcome.error
            logger.error(f"TMDb request failed after {policy.max_retries} attempts: {outcome.error}")
            raise MaxRetriesExceededError(policy.max_retries, url) from outcome.error

        try:
            data = outcome.value.json()
        except ValueError as e:
            logger.error(f"TMDb JSON decode failed: {e}")
            raise TMDbAPIError(f"Invalid JSON response: {e}")

        if not isinstance(data, dict):
            raise TMDbAPIError("Invalid JSON response: expected an object")

        if "success" in data and not data["success"]:
            logger.error(f"TMDb API error: {data.get('status_message', 'Unknown error')}")
            raise TMDbAPIError(f"TMDb API error: {data.get('status_message', 'Unknown error')}")

        return data

    def search_page(self, query: str, page: int = 1) -> SearchPage:
        """Fetch a single page of search results."""
        params: Dict[str, Any] = {"query": query, "page": page}
        if self.include_adult:
            params["include_adult"] = self.include_adult

        data = self._make_request(f"search/{self.kind}", params)
        try:
            result = SearchPage.from_json(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TMDbAPIError(f"Unexpected search response for page {page}: {e}")

        logger.debug(f"Page {result.page}/{result.total_pages}: {len(result.results)} results")
        return result

    def search(self, query: str) -> List[CatalogCandidate]:
        """
        Search TMDb and collect the results of every page.

        The first page tells how many pages exist; the rest are requested
        concurrently and appended in the order they complete.
        """
        logger.info(f"Searching TMDb for {self.kind}: '{query}'")
        first = self.search_page(query, 1)
        candidates = list(first.results)

        remaining = list(range(2, first.total_pages + 1))
        if remaining:
            workers = min(self.max_workers, len(remaining)) if self.max_workers else len(remaining)
            logger.info(f"Fetching {len(remaining)} more result pages with {workers} workers")

            with ThreadPoolExecutor(max_workers=workers) as executor:
                future_to_page = {executor.submit(self.search_page, query, page): page for page in remaining}

                for future in as_completed(future_to_page):
                    page = future_to_page[future]
                    try:
                        result = future.result()
                    except TMDbError as e:
                        logger.error(f"Error fetching page {page} for '{query}': {e}")
                        for pending in future_to_page:
                            pending.cancel()
                        raise
                    candidates.extend(result.results)

        logger.info(f"TMDb returned {len(candidates)} results for '{query}' ({first.total_results} reported)")
        for i, candidate in enumerate(candidates[:3]):
            logger.debug(
                f"  {i + 1}. {candidate.display_name} ({candidate.release_date or 'Unknown'}) - ID: {candidate.id}"
            )
        return candidates

    def get_details(self, tmdb_id: int) -> CatalogDetails:
        """Get detailed information for a specific show."""
        logger.debug(f"Getting {self.kind} details for ID: {tmdb_id}")
        data = self._make_request(f"{self.kind}/{tmdb_id}", retry=self.details_retry)
        try:
            return CatalogDetails.from_json(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TMDbAPIError(f"Unexpected details response for ID {tmdb_id}: {e}")
