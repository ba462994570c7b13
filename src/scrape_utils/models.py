"""
Data containers for fingerprints, markers and TMDb records.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple


@dataclass(frozen=True)
class Fingerprint:
    """Content state of a directory: one token per file, kept sorted."""

    tokens: Tuple[str, ...] = ()

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> "Fingerprint":
        return cls(tuple(sorted(tokens)))

    def __len__(self) -> int:
        return len(self.tokens)


@dataclass(frozen=True)
class Marker:
    """The persisted "already processed" record of a show directory."""

    tmdb_id: int
    fingerprint: Fingerprint

    def to_json(self) -> Dict[str, Any]:
        return {"tmdb_id": self.tmdb_id, "file_hashes": list(self.fingerprint.tokens)}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Marker":
        """Build a marker from its JSON form. Raises ValueError on a bad shape."""
        if not isinstance(data, dict):
            raise ValueError("marker must be a JSON object")

        tmdb_id = data.get("tmdb_id")
        hashes = data.get("file_hashes")
        if not isinstance(tmdb_id, int) or isinstance(tmdb_id, bool):
            raise ValueError("marker 'tmdb_id' must be an integer")
        if not isinstance(hashes, list) or not all(isinstance(h, str) for h in hashes):
            raise ValueError("marker 'file_hashes' must be a list of strings")

        return cls(tmdb_id=tmdb_id, fingerprint=Fingerprint.from_tokens(hashes))


@dataclass(frozen=True)
class CatalogCandidate:
    """One entry of a TMDb search result page."""

    id: int
    display_name: str
    release_date: Optional[str] = None
    overview: Optional[str] = None

    @property
    def year(self) -> Optional[str]:
        if self.release_date:
            return self.release_date.split("-")[0] or None
        return None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CatalogCandidate":
        # TV results carry name/first_air_date, movie results title/release_date
        return cls(
            id=int(data["id"]),
            display_name=data.get("name") or data.get("title") or data.get("original_name") or "",
            release_date=data.get("first_air_date") or data.get("release_date") or None,
            overview=data.get("overview") or None,
        )


@dataclass(frozen=True)
class SearchPage:
    """A single page of a TMDb search response."""

    page: int
    total_pages: int
    total_results: int
    results: List[CatalogCandidate] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SearchPage":
        return cls(
            page=int(data.get("page", 1)),
            total_pages=int(data.get("total_pages", 1)),
            total_results=int(data.get("total_results", 0)),
            results=[CatalogCandidate.from_json(item) for item in data.get("results") or []],
        )


@dataclass(frozen=True)
class Genre:
    name: str


@dataclass(frozen=True)
class CatalogDetails:
    """Fully resolved TMDb record used to write the show metadata."""

    id: int
    name: str
    overview: str = ""
    genres: List[Genre] = field(default_factory=list)
    first_air_date: Optional[str] = None
    rating: float = 0.0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CatalogDetails":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or data["title"],
            overview=data.get("overview") or "",
            genres=[Genre(g["name"]) for g in data.get("genres") or [] if g.get("name")],
            first_air_date=data.get("first_air_date") or data.get("release_date") or None,
            rating=float(data.get("vote_average") or 0.0),
        )


class EpisodeInfo(NamedTuple):
    """Season and episode numbers, both zero-padded strings."""

    season: str
    episode: str
