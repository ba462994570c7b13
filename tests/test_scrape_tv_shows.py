#!/usr/bin/env python3
"""
Test suite for scrape_tv_shows.py — the per-show pipeline and CLI
"""

import io
import json
from unittest.mock import MagicMock, patch

import pytest

import scrape_tv_shows
from common.settings import ConfigError, Settings
from scrape_tv_shows import ShowScraper
from scrape_utils.chooser import ConsoleChooser
from scrape_utils.models import CatalogCandidate, CatalogDetails, Genre
from scrape_utils.tmdb_client import TMDbNotFoundError


@pytest.fixture
def source(tmp_path):
    show = tmp_path / "source" / "My Show"
    show.mkdir(parents=True)
    (show / "My.Show.S01E01.1080p.mkv").write_bytes(b"one")
    (show / "My.Show.S01E02.1080p.mkv").write_bytes(b"two")
    (show / "Extras.mkv").write_bytes(b"extras")
    (show / "notes.txt").write_text("notes")
    return tmp_path / "source"


@pytest.fixture
def settings(tmp_path, source):
    return Settings(api_key="key", source=source, dest=tmp_path / "library")


@pytest.fixture
def client():
    client = MagicMock()
    client.search.return_value = [CatalogCandidate(id=42, display_name="My Show", release_date="2020-01-01")]
    client.get_details.return_value = CatalogDetails(
        id=42, name="My Show", overview="A show.", genres=[Genre("Drama")], first_air_date="2020-01-01", rating=7.1
    )
    return client


def make_scraper(settings, client, stdin="", **kwargs):
    chooser = ConsoleChooser(reader=io.StringIO(stdin), writer=io.StringIO())
    return ShowScraper(settings, logger=MagicMock(), client=client, chooser=chooser, **kwargs)


class TestFirstRun:

    def test_writes_nfo_links_and_marker(self, settings, client):
        summary = make_scraper(settings, client).run()

        show_dir = settings.dest / "My Show"
        assert summary == {"total": 1, "processed": 1, "skipped": 0, "failed": 0}
        assert "<tmdbid>42</tmdbid>" in (show_dir / "tvshow.nfo").read_text()
        assert (show_dir / "Season 01" / "My Show S01E01.mkv").read_bytes() == b"one"
        assert (show_dir / "Season 01" / "My Show S01E02.mkv").read_bytes() == b"two"

        marker = json.loads((show_dir / ".processed.json").read_text())
        assert marker["tmdb_id"] == 42
        assert len(marker["file_hashes"]) == 4
        assert marker["file_hashes"] == sorted(marker["file_hashes"])

    def test_unparseable_files_are_skipped(self, settings, client):
        make_scraper(settings, client).run()

        linked = sorted(p.name for p in (settings.dest / "My Show").rglob("*.mkv"))
        assert linked == ["My Show S01E01.mkv", "My Show S01E02.mkv"]


class TestIdempotence:

    def test_second_run_makes_no_requests(self, settings, client):
        make_scraper(settings, client).run()
        client.reset_mock()

        summary = make_scraper(settings, client).run()

        assert summary["skipped"] == 1
        client.search.assert_not_called()
        client.get_details.assert_not_called()

    def test_changed_content_is_resolved_again(self, settings, client, source):
        make_scraper(settings, client).run()
        client.reset_mock()
        (source / "My Show" / "My.Show.S01E03.mkv").write_bytes(b"three")

        summary = make_scraper(settings, client).run()

        assert summary["processed"] == 1
        client.search.assert_called_once_with("My Show")
        assert (settings.dest / "My Show" / "Season 01" / "My Show S01E03.mkv").exists()

    def test_force_ignores_marker(self, settings, client):
        make_scraper(settings, client).run()
        client.reset_mock()

        make_scraper(settings, client, force=True).run()

        client.search.assert_called_once()

    def test_renamed_file_is_linked_on_next_run(self, settings, client, source):
        make_scraper(settings, client).run()
        (source / "My Show" / "Extras.mkv").rename(source / "My Show" / "My.Show.S01E05.mkv")

        summary = make_scraper(settings, client).run()

        assert summary["processed"] == 1
        assert (settings.dest / "My Show" / "Season 01" / "My Show S01E05.mkv").read_bytes() == b"extras"

    def test_missing_nfo_uses_cached_id(self, settings, client):
        make_scraper(settings, client).run()
        (settings.dest / "My Show" / "tvshow.nfo").unlink()
        client.reset_mock()

        make_scraper(settings, client).run()

        client.search.assert_not_called()
        client.get_details.assert_called_once_with(42)


class TestFailures:

    def test_failing_show_does_not_stop_the_run(self, settings, client, source):
        (source / "Unknown Show").mkdir()
        (source / "Unknown Show" / "e01.mkv").write_bytes(b"x")

        def search(name):
            if name == "Unknown Show":
                raise TMDbNotFoundError(name)
            return [CatalogCandidate(id=42, display_name="My Show")]

        client.search.side_effect = search

        summary = make_scraper(settings, client).run()

        assert summary == {"total": 2, "processed": 1, "skipped": 0, "failed": 1}
        assert not (settings.dest / "Unknown Show" / ".processed.json").exists()

    def test_failed_show_leaves_no_marker(self, settings, client):
        client.get_details.side_effect = TMDbNotFoundError("My Show")

        summary = make_scraper(settings, client).run()

        assert summary["failed"] == 1
        assert not (settings.dest / "My Show" / ".processed.json").exists()

    def test_ambiguous_search_uses_operator_choice(self, settings, client):
        client.search.return_value = [
            CatalogCandidate(id=1, display_name="My Show (1990)"),
            CatalogCandidate(id=42, display_name="My Show", release_date="2020-01-01"),
        ]

        make_scraper(settings, client, stdin="x\n2\n").run()

        client.get_details.assert_called_once_with(42)


class TestDryRun:

    def test_writes_nothing(self, settings, client):
        summary = make_scraper(settings, client, dry_run=True).run()

        assert summary["processed"] == 1
        assert not settings.dest.exists()


class TestMain:

    def test_missing_configuration_exits_with_1(self, monkeypatch):
        monkeypatch.setattr(scrape_tv_shows, "setup_logging", MagicMock())
        monkeypatch.setattr(scrape_tv_shows, "load_settings", MagicMock(side_effect=ConfigError("no key")))

        with pytest.raises(SystemExit) as exc:
            scrape_tv_shows.main([])

        assert exc.value.code == 1

    def test_runs_scraper(self, monkeypatch, settings):
        monkeypatch.setattr(scrape_tv_shows, "setup_logging", MagicMock())
        monkeypatch.setattr(scrape_tv_shows, "load_settings", MagicMock(return_value=settings))

        with patch.object(ShowScraper, "run") as run, patch.object(ShowScraper, "install_signal_handlers"):
            scrape_tv_shows.main(["--force", "--dry-run"])

        run.assert_called_once()


class TestSignals:

    def test_first_signal_stops_after_current_show(self, settings, client):
        scraper = make_scraper(settings, client)
        scraper._signal_handler(2, None)

        assert scraper.running is False
        assert scraper.run()["total"] == 0

    def test_second_signal_interrupts(self, settings, client):
        scraper = make_scraper(settings, client)
        scraper._signal_handler(2, None)

        with pytest.raises(KeyboardInterrupt):
            scraper._signal_handler(2, None)

    def test_interrupt_at_prompt_exits_with_1(self, monkeypatch, settings):
        monkeypatch.setattr(scrape_tv_shows, "setup_logging", MagicMock())
        monkeypatch.setattr(scrape_tv_shows, "load_settings", MagicMock(return_value=settings))

        with patch.object(ShowScraper, "run", side_effect=KeyboardInterrupt), \
                patch.object(ShowScraper, "install_signal_handlers"):
            with pytest.raises(SystemExit) as exc:
                scrape_tv_shows.main([])

        assert exc.value.code == 1
