"""
Persistence of the per-show "already processed" marker.

Each destination show folder holds a ``.processed.json`` file recording the
TMDb id the show resolved to and the fingerprint of its source folder at the
time. A missing marker and a stale marker mean the same thing: the show has to
be resolved again.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from common.constants import MARKER_FILE_NAME
from common.file_manager import write_text_atomic

from .models import Fingerprint, Marker

logger = logging.getLogger(__name__)


def marker_path(directory: Path) -> Path:
    return directory / MARKER_FILE_NAME


def load(directory: Path) -> Optional[Marker]:
    """
    Load the marker of a destination show folder.

    Returns:
        The stored marker, or None when there is none. An unreadable or
        malformed marker is reported and treated as missing.
    """
    path = marker_path(directory)
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Marker.from_json(data)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable marker {path}: {e}")
        return None


def matches(marker: Marker, current: Fingerprint) -> bool:
    """Whether the marker was written for the same directory content."""
    return sorted(marker.fingerprint.tokens) == sorted(current.tokens)


def save(directory: Path, marker: Marker) -> Path:
    """
    Write the marker, creating the folder when needed.

    Raises:
        FileOperationError: If the marker cannot be written. The previous
            marker, if any, is left in place.
    """
    path = marker_path(directory)
    write_text_atomic(path, json.dumps(marker.to_json(), indent=2) + "\n")
    logger.debug(f"Wrote marker {path} (tmdb_id={marker.tmdb_id}, files={len(marker.fingerprint)})")
    return path
