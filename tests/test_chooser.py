#!/usr/bin/env python3
"""
Test suite for scrape_utils/chooser.py — interactive disambiguation
"""

import io

import pytest

from scrape_utils.chooser import (
    ConsoleChooser,
    InvalidSelectionError,
    SelectionAbortedError,
    format_candidates,
    parse_choice,
)


def choose(candidates, text):
    writer = io.StringIO()
    chooser = ConsoleChooser(reader=io.StringIO(text), writer=writer)
    return chooser.choose(candidates), writer.getvalue()


class TestParseChoice:

    def test_valid_choice_is_zero_based(self):
        assert parse_choice(" 2 \n", 3) == 1

    @pytest.mark.parametrize("text", ["0", "4", "-1"])
    def test_out_of_range(self, text):
        with pytest.raises(InvalidSelectionError, match="Choice is out of range."):
            parse_choice(text, 3)

    @pytest.mark.parametrize("text", ["bad", "", "1.5", "two"])
    def test_non_numeric(self, text):
        with pytest.raises(InvalidSelectionError, match="Invalid input. Please enter a number."):
            parse_choice(text, 3)


class TestFormatCandidates:

    def test_numbered_list_with_year_placeholder(self, candidates):
        text = format_candidates(candidates)
        assert "1. Game of Thrones (2011)" in text
        assert "2. Thrones Documentary (????)" in text
        assert "3. Game of Thrones Revisited (2019)" in text


class TestConsoleChooser:

    def test_picks_second(self, candidates):
        chosen, output = choose(candidates, "2\n")
        assert chosen.id == 2001
        assert "Enter number (1-3): " in output

    def test_reprompts_after_bad_input(self, candidates):
        chosen, output = choose(candidates, "bad\n3\n")

        assert chosen.id == 3003
        assert "Invalid input. Please enter a number." in output
        assert output.count("Enter number (1-3): ") == 2

    def test_rejects_out_of_range_and_reprompts(self, candidates):
        chosen, output = choose(candidates, "0\n4\n1\n")

        assert chosen.id == 1399
        assert output.count("Choice is out of range.") == 2
        assert output.count("Enter number (1-3): ") == 3

    def test_end_of_input_aborts(self, candidates):
        with pytest.raises(SelectionAbortedError):
            choose(candidates, "bad\n")
