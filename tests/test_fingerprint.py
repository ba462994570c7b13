#!/usr/bin/env python3
"""
Test suite for scrape_utils/fingerprint.py
"""

import hashlib
import os

import pytest

from scrape_utils.fingerprint import fingerprint, hash_file


@pytest.fixture
def show_dir(tmp_path):
    show = tmp_path / "Show"
    show.mkdir()
    (show / "Show.S01E01.mkv").write_bytes(b"episode one")
    (show / "Show.S01E02.mkv").write_bytes(b"episode two")
    return show


class TestFingerprint:

    def test_deterministic(self, show_dir):
        assert fingerprint(show_dir) == fingerprint(show_dir)

    def test_tokens_hash_relative_path_and_content(self, show_dir):
        expected = sorted(
            hashlib.sha256(f"{name}\0{hashlib.sha256(data).hexdigest()}".encode()).hexdigest()
            for name, data in (("Show.S01E01.mkv", b"episode one"), ("Show.S01E02.mkv", b"episode two"))
        )
        assert list(fingerprint(show_dir).tokens) == expected

    def test_changes_when_file_added(self, show_dir):
        before = fingerprint(show_dir)
        (show_dir / "Show.S01E03.mkv").write_bytes(b"episode three")
        assert fingerprint(show_dir) != before

    def test_changes_when_file_removed(self, show_dir):
        before = fingerprint(show_dir)
        (show_dir / "Show.S01E02.mkv").unlink()
        assert fingerprint(show_dir) != before

    def test_changes_when_file_modified(self, show_dir):
        before = fingerprint(show_dir)
        (show_dir / "Show.S01E02.mkv").write_bytes(b"episode two, repacked")
        assert fingerprint(show_dir) != before

    def test_changes_when_file_renamed(self, show_dir):
        before = fingerprint(show_dir)
        (show_dir / "Show.S01E02.mkv").rename(show_dir / "Show - S01E05.mkv")
        assert fingerprint(show_dir) != before

    def test_same_content_in_another_directory_matches(self, show_dir, tmp_path):
        copy = tmp_path / "Copy"
        copy.mkdir()
        for path in show_dir.iterdir():
            (copy / path.name).write_bytes(path.read_bytes())
        assert fingerprint(copy) == fingerprint(show_dir)

    def test_touch_without_edit_keeps_fingerprint(self, show_dir):
        before = fingerprint(show_dir)
        os.utime(show_dir / "Show.S01E01.mkv", (1, 1))
        assert fingerprint(show_dir) == before

    def test_includes_season_subfolders(self, show_dir):
        before = fingerprint(show_dir)
        season = show_dir / "Season 02"
        season.mkdir()
        (season / "Show.S02E01.mkv").write_bytes(b"season two")
        assert len(fingerprint(show_dir)) == len(before) + 1

    def test_empty_directory(self, tmp_path):
        assert fingerprint(tmp_path).tokens == ()

    def test_missing_directory_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            fingerprint(tmp_path / "missing")


class TestHashFile:

    def test_large_file_read_in_chunks(self, tmp_path):
        data = os.urandom(3 * 1024 * 1024 + 17)
        path = tmp_path / "big.bin"
        path.write_bytes(data)
        assert hash_file(path) == hashlib.sha256(data).hexdigest()
