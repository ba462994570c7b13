"""
File manager for handling show directories and episode links.

This module provides functions for scanning show folders, writing files
atomically and linking episode files into the destination library.
"""

import errno
import logging
import os
import tempfile
from pathlib import Path
from typing import Generator, List

from .constants import VIDEO_EXTENSIONS

logger = logging.getLogger(__name__)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class FileOperationError(Exception):
    """Exception for file operation failures."""

    pass


### Internal helper functions ###
def _remove_existing(path: Path) -> None:
    """Remove an existing file or link so it can be replaced."""
    if path.is_symlink() or path.exists():
        try:
            path.unlink()
            logger.debug(f"Removed existing link: {path}")
        except OSError as e:
            raise FileOperationError(f"Failed to remove existing file {path}: {e}")


def _link_file(source: Path, destination: Path) -> str:
    """
    Link source to destination, preferring a hard link.

    Falls back to a symlink when the destination is on another filesystem
    or hard links are not permitted there.

    Returns:
        "hardlink" or "symlink"
    """
    try:
        os.link(source, destination)
        return "hardlink"
    except OSError as e:
        if e.errno not in {errno.EXDEV, errno.EPERM, errno.EMLINK, errno.ENOTSUP}:
            raise FileOperationError(f"Failed to link {source} to {destination}: {e}")
        logger.warning(f"Hard link not possible for {source.name} ({e.strerror}), using symlink")

    try:
        os.symlink(source.resolve(), destination)
        return "symlink"
    except OSError as e:
        raise FileOperationError(f"Failed to symlink {source} to {destination}: {e}")


### Public functions ###
def list_show_directories(source: Path) -> List[Path]:
    """
    List the show folders directly under the source directory.

    Hidden folders are ignored. The result is sorted by name.
    """
    if not source.is_dir():
        raise FileOperationError(f"Source is not a directory: {source}")

    try:
        entries = list(source.iterdir())
    except OSError as e:
        raise FileOperationError(f"Failed to list source directory {source}: {e}")

    return sorted(p for p in entries if p.is_dir() and not p.name.startswith("."))


def scan_media_files(directory: Path, recursive: bool = True) -> Generator[Path, None, None]:
    """
    Scan a directory for media files.

    Args:
        directory: Directory to scan
        recursive: Whether to scan subdirectories

    Yields:
        Path objects for found media files, in sorted order
    """
    if not directory.exists():
        logger.warning(f"Directory does not exist: {directory}")
        return

    if not directory.is_dir():
        logger.error(f"Path is not a directory: {directory}")
        return

    pattern = "**/*" if recursive else "*"

    for path in sorted(directory.glob(pattern)):
        if path.is_file() and path.suffix.lower() in VIDEO_EXTENSIONS:
            yield path


def ensure_directory_exists(directory: Path) -> None:
    """Ensure a directory exists, creating it if necessary."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Ensured directory exists: {directory}")
    except OSError as e:
        raise FileOperationError(f"Failed to create directory {directory}: {e}")


def write_text_atomic(path: Path, content: str) -> None:
    """
    Write text to path so readers see either the old or the new content.

    The content goes to a temporary file in the same directory which then
    replaces the target. On failure the previous file is left untouched.
    """
    ensure_directory_exists(path.parent)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        # mkstemp creates 0600; give the file the mode a plain open() would
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise FileOperationError(f"Failed to write {path}: {e}")


def place_episode(source: Path, show_dir: Path, show_name: str, season: str, episode: str) -> Path:
    """
    Link an episode file into the show's season folder.

    Layout: ``<show_dir>/Season <ss>/<show_name> S<ss>E<ee><ext>``.
    An existing file at the target is replaced so reruns stay idempotent.

    Returns:
        The path of the created link
    """
    season_dir = show_dir / f"Season {season}"
    ensure_directory_exists(season_dir)

    destination = season_dir / f"{show_name} S{season}E{episode}{source.suffix}"
    _remove_existing(destination)

    link_type = _link_file(source, destination)
    logger.info(f"Created {link_type}: {source.name} -> {destination}")
    return destination
