#!/usr/bin/env python3
"""
TV Show Scraper: resolves show folders against TMDb and links them into a library.

For every show folder in the source directory this script:
- Fingerprints the folder content and skips it if nothing changed
- Resolves the folder name to a TMDb id (asking when several shows match)
- Writes tvshow.nfo with the show metadata
- Hard-links each episode as "<Show> SxxEyy.ext" under its season folder
- Records the TMDb id and fingerprint in .processed.json
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

# Add the src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from common import (
    DEFAULT_LOG_LEVEL,
    LOG_DIR,
    NFO_FILE_NAME,
    ConfigError,
    FileOperationError,
    Settings,
    list_show_directories,
    load_settings,
    place_episode,
    scan_media_files,
    setup_logging,
    write_text_atomic,
)
from scrape_utils import (
    CatalogResolver,
    ConsoleChooser,
    Marker,
    TMDbClient,
    TMDbError,
    build_rule_set,
    fingerprint,
    parse_episode,
    render_tvshow_nfo,
    sanitize_filename,
)
from scrape_utils import marker_store

PROCESSED = "processed"
SKIPPED = "skipped"


class ShowScraper:
    """Runs the scrape pipeline over every show folder of the source directory."""

    def __init__(
            self,
            settings: Settings,
            dry_run: bool = False,
            force: bool = False,
            log_level: str = DEFAULT_LOG_LEVEL,
            logger=None,
            client: Optional[TMDbClient] = None,
            chooser: Optional[ConsoleChooser] = None,
    ):
        """
        Initialize the scraper.

        Args:
            settings: Run configuration
            dry_run: Resolve and report without writing anything
            force: Ignore up-to-date markers and search again
            log_level: Logging level, used when no logger is given
            logger: Pre-configured application logger
            client: TMDb client, built from settings when omitted
            chooser: Disambiguation console, stdin/stdout when omitted
        """
        self.settings = settings
        self.dry_run = dry_run
        self.force = force

        self.logger = logger or setup_logging(log_level=log_level, log_dir=Path(LOG_DIR))

        self.rule_set = build_rule_set(settings.subgroup_rules)
        self.resolver = CatalogResolver(client or TMDbClient.from_settings(settings), chooser)

        self.running = True

        self.logger.info("TV Show Scraper initialized", dry_run=dry_run, force=force)

    def _signal_handler(self, signum, _frame):
        """Handle shutdown signals gracefully; a second signal aborts at once."""
        if not self.running:
            raise KeyboardInterrupt
        self.logger.info(f"Received signal {signum}, finishing current show and shutting down (send again to abort)...")
        self.running = False

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGINT, self._signal_handler)
        try:
            signal.signal(signal.SIGTERM, self._signal_handler)
        except (AttributeError, OSError):
            pass

    def run(self) -> dict:
        """Process every show folder and return the summary counters."""
        source = self.settings.source
        self.logger.info(f"Starting scrape from: {source} -> {self.settings.dest}")

        summary = {"total": 0, PROCESSED: 0, SKIPPED: 0, "failed": 0}

        for show_dir in list_show_directories(source):
            if not self.running:
                break

            summary["total"] += 1
            try:
                result = self._process_show(show_dir)
                summary[result] += 1
            except (TMDbError, FileOperationError, OSError) as e:
                self.logger.error(f"Failed to process '{show_dir.name}': {e}", show=show_dir.name)
                summary["failed"] += 1
            except Exception as e:
                self.logger.error(
                    f"Unexpected error processing '{show_dir.name}': {e}", show=show_dir.name, exc_info=True
                )
                summary["failed"] += 1

        prefix = "DRY RUN COMPLETE" if self.dry_run else "Scrape completed"
        self.logger.info(
            f"{prefix} - "
            f"Total: {summary['total']}, "
            f"Processed: {summary[PROCESSED]}, "
            f"Up-to-date: {summary[SKIPPED]}, "
            f"Failed: {summary['failed']}"
        )
        return summary

    def _process_show(self, show_dir: Path) -> str:
        """Process one show folder; raises on any failure for this show."""
        show_name = sanitize_filename(show_dir.name)
        dest_dir = self.settings.dest / show_name
        self.logger.info(f"Processing show: {show_dir.name}")

        # Step 1: Fingerprint source content
        current = fingerprint(show_dir)

        # Step 2: Check the marker
        known_id = None
        if not self.force:
            marker = marker_store.load(dest_dir)
            if marker and marker_store.matches(marker, current):
                if (dest_dir / NFO_FILE_NAME).exists():
                    self.logger.info(
                        f"'{show_name}' is up-to-date (TMDb ID {marker.tmdb_id}), skipping", show=show_name
                    )
                    return SKIPPED
                known_id = marker.tmdb_id

        # Step 3: Resolve and fetch metadata
        tmdb_id = self.resolver.resolve(show_dir.name, known_id)
        details = self.resolver.fetch_details(tmdb_id)
        self.logger.log_tmdb_request("details", show_name, True, tmdb_id=tmdb_id)

        if self.dry_run:
            self.logger.info(f"DRY RUN: Would write {NFO_FILE_NAME} for '{details.name}' to {dest_dir}")
            self._organize_files(show_dir, dest_dir, show_name)
            return PROCESSED

        # Step 4: Write metadata and link episodes
        nfo_path = dest_dir / NFO_FILE_NAME
        write_text_atomic(nfo_path, render_tvshow_nfo(details))
        self.logger.log_file_operation("write_nfo", nfo_path)

        self._organize_files(show_dir, dest_dir, show_name)

        # Step 5: Record the result last so an interrupted show is retried next run
        marker_store.save(dest_dir, Marker(tmdb_id=tmdb_id, fingerprint=current))
        self.logger.info(f"Successfully processed '{show_name}'", show=show_name, tmdb_id=tmdb_id)
        return PROCESSED

    def _organize_files(self, show_dir: Path, dest_dir: Path, show_name: str) -> int:
        """Link every recognised episode into dest_dir, returning the count."""
        linked = 0
        for video_file in scan_media_files(show_dir):
            info = parse_episode(video_file.name, self.rule_set)
            if info is None:
                self.logger.info(f"Skipping '{video_file.name}': Could not extract episode info.")
                continue

            if self.dry_run:
                self.logger.info(f"DRY RUN: Would link {video_file.name} as S{info.season}E{info.episode}")
            else:
                destination = place_episode(video_file, dest_dir, show_name, info.season, info.episode)
                self.logger.log_file_operation("link", video_file, destination)
            linked += 1

        self.logger.info(f"Organized {linked} episode files for '{show_name}'")
        return linked


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="TV show scraper - resolves show folders on TMDb, writes NFO files and links episodes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
 Examples:
   %(prog)s                                    # Use SOURCE and DEST from the environment / .env
   %(prog)s /downloads/tv /library/tv          # Explicit source and destination
   %(prog)s --force                            # Search again even for unchanged shows
   %(prog)s --dry-run                          # Preview without writing anything
   %(prog)s --log-level DEBUG                  # Enable debug logging
        """,
    )

    parser.add_argument("source", nargs="?", help="Directory containing one folder per show (default: $SOURCE)")
    parser.add_argument("dest", nargs="?", help="Destination library directory (default: $DEST)")
    parser.add_argument("-f", "--force", action="store_true", help="Force TMDb search even if files are unchanged")
    parser.add_argument("--dry-run", action="store_true", help="Preview changes without making modifications")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        default=DEFAULT_LOG_LEVEL,
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args(argv)

    logger = setup_logging(log_level=args.log_level, log_dir=Path(LOG_DIR))

    try:
        settings = load_settings(args.source, args.dest)
        scraper = ShowScraper(settings, dry_run=args.dry_run, force=args.force, logger=logger)
    except (ConfigError, TMDbError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    scraper.install_signal_handlers()

    try:
        scraper.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(1)
    except FileOperationError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
