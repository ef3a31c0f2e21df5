from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

TMDB_MOVIE_URL_BASE = "https://www.themoviedb.org/movie"


def build_detail_url(tmdb_id: int) -> str:
    return f"{TMDB_MOVIE_URL_BASE}/{int(tmdb_id)}"


@dataclass(frozen=True)
class ReleaseWindow:
    """Inclusive range of primary release dates considered "upcoming"."""

    start: date
    end: date

    @classmethod
    def upcoming(cls, today: date, days: int) -> ReleaseWindow:
        return cls(start=today, end=today + timedelta(days=days))


@dataclass(frozen=True)
class Genre:
    id: int
    name: str


@dataclass(frozen=True)
class MovieSummary:
    """
    One entry of a TMDb `/discover/movie` response.

    `genre` is the genre the query filtered on; it is not re-checked against
    `genre_ids`.
    """

    tmdb_id: int
    title: str
    release_date: date
    genre: str
    genre_ids: tuple[int, ...] = ()
    overview: str | None = None
    popularity: float | None = None

    @property
    def detail_url(self) -> str:
        return build_detail_url(self.tmdb_id)


@dataclass(frozen=True)
class DiscoverPage:
    page: int
    total_pages: int
    total_results: int
    movies: list[MovieSummary] = field(default_factory=list)
