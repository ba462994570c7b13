"""
Resolution of show folder names to TMDb ids and details.
"""

import logging
from typing import Optional

from .chooser import ConsoleChooser
from .models import CatalogDetails
from .tmdb_client import TMDbClient, TMDbNotFoundError

logger = logging.getLogger(__name__)


class CatalogResolver:
    """Turns a folder name into a TMDb id, asking the operator when ambiguous."""

    def __init__(self, client: TMDbClient, chooser: Optional[ConsoleChooser] = None):
        self.client = client
        self.chooser = chooser or ConsoleChooser()

    def resolve(self, query_name: str, known_id: Optional[int] = None) -> int:
        """
        Return the TMDb id for query_name.

        A known id (from an up-to-date marker) is returned without searching.

        Raises:
            TMDbNotFoundError: If the search has no results
            UnrecoverableStatusError, MaxRetriesExceededError: On request failure
            SelectionAbortedError: If input ends during disambiguation
        """
        if known_id is not None:
            logger.info(f"Using cached TMDb ID {known_id} for '{query_name}'")
            return known_id

        candidates = self.client.search(query_name)
        if not candidates:
            raise TMDbNotFoundError(query_name)

        if len(candidates) == 1:
            chosen = candidates[0]
            logger.info(f"Single match for '{query_name}': {chosen.display_name} - ID: {chosen.id}")
        else:
            chosen = self.chooser.choose(candidates)
            logger.info(f"Selected for '{query_name}': {chosen.display_name} - ID: {chosen.id}")

        return chosen.id

    def fetch_details(self, tmdb_id: int) -> CatalogDetails:
        logger.info(f"Fetching details for TMDb ID {tmdb_id}...")
        return self.client.get_details(tmdb_id)
