"""
Interactive choice between several TMDb candidates.

The console reads from and writes to whatever streams it is given, so tests
can drive it with ``io.StringIO``.
"""

import sys
from typing import Optional, Sequence, TextIO

from .models import CatalogCandidate
from .tmdb_client import TMDbError


class InvalidSelectionError(ValueError):
    """Exception for input that does not name one of the listed candidates."""

    pass


class SelectionAbortedError(TMDbError):
    """Exception for input ending before a valid choice was made."""

    pass


def format_candidates(candidates: Sequence[CatalogCandidate]) -> str:
    """Render the numbered candidate list."""
    lines = ["Multiple results found, please choose one:"]
    for i, candidate in enumerate(candidates, start=1):
        lines.append(f"{i}. {candidate.display_name} ({candidate.year or '????'})")
    return "\n".join(lines) + "\n"


def parse_choice(text: str, count: int) -> int:
    """
    Convert user input into a 0-based candidate index.

    Raises:
        InvalidSelectionError: For non-numeric or out-of-range input
    """
    try:
        choice = int(text.strip())
    except ValueError:
        raise InvalidSelectionError("Invalid input. Please enter a number.")

    if not 1 <= choice <= count:
        raise InvalidSelectionError("Choice is out of range.")
    return choice - 1


class ConsoleChooser:
    """Asks the operator to pick one candidate, repeating until the answer is valid."""

    def __init__(self, reader: Optional[TextIO] = None, writer: Optional[TextIO] = None):
        self.reader = reader or sys.stdin
        self.writer = writer or sys.stdout

    def choose(self, candidates: Sequence[CatalogCandidate]) -> CatalogCandidate:
        self.writer.write(format_candidates(candidates) + "\n")

        while True:
            self.writer.write(f"Enter number (1-{len(candidates)}): ")
            self.writer.flush()

            line = self.reader.readline()
            if not line:
                raise SelectionAbortedError("Input closed before a candidate was chosen")

            try:
                return candidates[parse_choice(line, len(candidates))]
            except InvalidSelectionError as e:
                self.writer.write(f"{e}\n")
