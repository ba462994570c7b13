"""Shared fixtures for the scraper test suite."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from scrape_utils.models import CatalogCandidate


def make_response(status=200, payload=None):
    """Fake requests.Response with a status code and a JSON body."""
    response = MagicMock()
    response.status_code = status
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload if payload is not None else {}
    return response


def search_payload(page, total_pages, results):
    return {
        "page": page,
        "total_pages": total_pages,
        "total_results": len(results) * total_pages,
        "results": results,
    }


@pytest.fixture
def candidates():
    return [
        CatalogCandidate(id=1399, display_name="Game of Thrones", release_date="2011-04-17"),
        CatalogCandidate(id=2001, display_name="Thrones Documentary", release_date=None),
        CatalogCandidate(id=3003, display_name="Game of Thrones Revisited", release_date="2019-05-20"),
    ]


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def sleep():
    return MagicMock()
