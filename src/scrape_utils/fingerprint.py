"""
Directory fingerprinting.

A fingerprint holds one token per regular file below a show directory: the
SHA-256 of the file's relative path joined with its content hash. Touching a
file without editing it keeps the fingerprint, while adding, removing,
editing or renaming a file changes it.
"""

import hashlib
import logging
from pathlib import Path
from typing import List

from common.constants import HASH_CHUNK_SIZE

from .models import Fingerprint

logger = logging.getLogger(__name__)


def hash_file(path: Path) -> str:
    """Return the hex SHA-256 digest of a file's content."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def file_token(directory: Path, path: Path) -> str:
    """Token for one file: SHA-256 of '<relative posix path>\\0<content digest>'."""
    relative = path.relative_to(directory).as_posix()
    return hashlib.sha256(f"{relative}\0{hash_file(path)}".encode("utf-8")).hexdigest()


def _regular_files(directory: Path) -> List[Path]:
    # rglob swallows listing errors, so an unreadable root is checked up front
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    next(directory.iterdir(), None)
    return [p for p in directory.rglob("*") if p.is_file()]


def fingerprint(directory: Path) -> Fingerprint:
    """
    Compute the fingerprint of a directory.

    Raises:
        OSError: If the directory cannot be listed or a file cannot be read
    """
    files = _regular_files(directory)
    tokens = [file_token(directory, path) for path in files]
    logger.debug(f"Fingerprinted {len(tokens)} files in {directory}")
    return Fingerprint.from_tokens(tokens)
