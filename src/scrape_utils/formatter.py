"""
Formatting of show metadata and destination names.

This module renders the ``tvshow.nfo`` document read by Kodi, Jellyfin and
Emby, and cleans folder names for use in the destination library.
"""

import logging
import re
from xml.sax.saxutils import escape

from .models import CatalogDetails

logger = logging.getLogger(__name__)


def sanitize_filename(text: str) -> str:
    """Remove characters that are problematic in filenames."""
    invalid_chars = r'[<>:"/\\|?*]'
    return " ".join(re.sub(invalid_chars, "", text).split())


def _year_of(date: str) -> str:
    year = date.split("-")[0] if date else ""
    return year or "????"


def render_tvshow_nfo(details: CatalogDetails) -> str:
    """
    Render the tvshow.nfo XML for a show.

    Example output (abridged):
        <tvshow>
            <title>Game of Thrones</title>
            <year>2011</year>
            <uniqueid type="tmdb">1399</uniqueid>
        </tvshow>
    """
    premiered = details.first_air_date or ""
    genres = "\n".join(f"    <genre>{escape(g.name)}</genre>" for g in details.genres)

    lines = [
        '<?xml version="1.0" encoding="utf-8" standalone="yes"?>',
        "<tvshow>",
        f"    <title>{escape(details.name)}</title>",
        f"    <plot>{escape(details.overview)}</plot>",
        f"    <year>{_year_of(premiered)}</year>",
        f"    <premiered>{escape(premiered)}</premiered>",
        f"    <rating>{details.rating:g}</rating>",
        f"    <tmdbid>{details.id}</tmdbid>",
        f'    <uniqueid type="tmdb" default="true">{details.id}</uniqueid>',
    ]
    if genres:
        lines.append(genres)
    lines.append("</tvshow>")

    logger.debug(f"Rendered NFO for {details.name} ({details.id})")
    return "\n".join(lines) + "\n"
