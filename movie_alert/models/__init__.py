"""
Domain models shared across the integrations and the run.
"""

from movie_alert.models.movies import (
    TMDB_MOVIE_URL_BASE,
    DiscoverPage,
    Genre,
    MovieSummary,
    ReleaseWindow,
    build_detail_url,
)

__all__ = [
    "TMDB_MOVIE_URL_BASE",
    "DiscoverPage",
    "Genre",
    "MovieSummary",
    "ReleaseWindow",
    "build_detail_url",
]
